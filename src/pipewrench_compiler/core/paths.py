from __future__ import annotations

from pathlib import Path, PurePosixPath

from pipewrench_compiler.models import SCOPE_FOLDERS, ProjectConfig, Scope

_SCOPE_NAMES = {s.value: s for s in SCOPE_FOLDERS}


def normalize_path(path: str | Path) -> str:
    """Return ``path`` with ``/`` separators and no trailing separator."""
    normalized = str(path).replace("\\", "/")
    while len(normalized) > 1 and normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def split_segments(path: str | Path) -> list[str]:
    return [seg for seg in normalize_path(path).split("/") if seg and seg != "."]


def classify_scope(path: str | Path) -> Scope:
    """Scope named by the first segment of a relative path; segments are matched exactly."""
    segments = split_segments(path)
    if not segments:
        return Scope.NONE
    return _SCOPE_NAMES.get(segments[0], Scope.NONE)


def relative_to_root(config: ProjectConfig, path: str | Path) -> PurePosixPath | None:
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = config.root / candidate
    try:
        rel = candidate.resolve().relative_to(config.root.resolve())
    except ValueError:
        return None
    return PurePosixPath(normalize_path(rel))


def mirror_source_path(config: ProjectConfig, path: str | Path) -> Path | None:
    """Output location mirroring a file or directory inside the project's source tree.

    Scope folders mirror into ``media/lua/<scope>``, asset folders into
    ``media/<asset>``. Paths outside both return None.
    """
    target = Path(path)
    if not target.is_absolute():
        target = config.root / target
    target = target.resolve()

    for scope in SCOPE_FOLDERS:
        base = config.scope_src_dir(scope).resolve()
        if target == base or base in target.parents:
            return config.lua_out_dir / scope.value / target.relative_to(base)

    for name, source in config.asset_dirs.items():
        base = source.resolve()
        if target == base or base in target.parents:
            return config.mod_out_dir / "media" / name / target.relative_to(base)

    return None


def to_output_suffix(path: Path) -> Path:
    """Map a TypeScript source path onto the Lua file the compiler emits for it."""
    if path.suffix.lower() in {".ts", ".tsx"} and not path.name.lower().endswith(".d.ts"):
        return path.with_suffix(".lua")
    return path
