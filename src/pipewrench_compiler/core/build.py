"""One full build pass: copy raw files, compile the whole tree, emit every unit."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pipewrench_compiler.core.emit import emit_units
from pipewrench_compiler.core.manifest import MANIFEST_NAME, write_manifest
from pipewrench_compiler.core.ports.compiler import ExternalCompiler
from pipewrench_compiler.core.reimport import ReimportSettings
from pipewrench_compiler.errors import FileSystemError
from pipewrench_compiler.models import SCOPE_FOLDERS, BuildJob, BuildKind, ProjectConfig

logger = logging.getLogger(__name__)

MARKER_NAME = "_.ts"

# Shipped by the PipeWrench npm packages, copied next to the compiled code.
RUNTIME_LIBRARIES: tuple[str, ...] = (
    "node_modules/@shughesuk/pipewrench/PipeWrench.lua",
    "node_modules/@shughesuk/pipewrench-events/PipeWrench-Events.lua",
    "node_modules/@shughesuk/pipewrench-utils/PipeWrench-Utils.lua",
)

_SOURCE_SUFFIXES = (".ts", ".tsx")


def is_source_file(path: Path) -> bool:
    return path.name.lower().endswith(_SOURCE_SUFFIXES)


def copy_file(source: Path, destination: Path) -> Path:
    logger.debug('Copying "%s" to "%s"', source, destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as exc:
        raise FileSystemError(f"Could not copy {source} to {destination}: {exc}", source) from exc
    return destination


def copy_tree(source_dir: Path, dest_dir: Path, *, skip_sources: bool) -> list[Path]:
    if not source_dir.is_dir():
        return []
    copied = []
    for path in sorted(source_dir.rglob("*")):
        if not path.is_file() or (skip_sources and is_source_file(path)):
            continue
        copied.append(copy_file(path, dest_dir / path.relative_to(source_dir)))
    return copied


def copy_scope_files(config: ProjectConfig) -> list[Path]:
    copied = []
    for scope in SCOPE_FOLDERS:
        copied += copy_tree(config.scope_src_dir(scope), config.lua_out_dir / scope.value, skip_sources=True)
    return copied


def copy_assets(config: ProjectConfig) -> list[Path]:
    copied = []
    for name, source in config.asset_dirs.items():
        copied += copy_tree(source, config.mod_out_dir / "media" / name, skip_sources=False)
    return copied


def copy_runtime_libraries(config: ProjectConfig, libraries: tuple[str, ...] = RUNTIME_LIBRARIES) -> list[Path]:
    copied = []
    shared = config.lua_out_dir / "shared"
    for library in libraries:
        source = config.root / library
        if not source.is_file():
            logger.warning("Runtime library not found, skipping: %s", source)
            continue
        copied.append(copy_file(source, shared / source.name))
    return copied


@contextmanager
def scope_markers(config: ProjectConfig) -> Iterator[list[Path]]:
    """Temporarily ensure every scope root holds at least one entry file.

    Only the markers, and any scope folders, created here are removed afterwards.
    """
    created: list[Path] = []
    created_dirs: list[Path] = []
    try:
        for scope in SCOPE_FOLDERS:
            marker = config.scope_src_dir(scope) / MARKER_NAME
            if marker.exists():
                continue
            missing = [folder for folder in (marker.parent, *marker.parent.parents) if not folder.exists()]
            marker.parent.mkdir(parents=True, exist_ok=True)
            created_dirs.extend(missing)
            marker.write_text("", encoding="utf-8")
            created.append(marker)
        yield created
    finally:
        for marker in created:
            marker.unlink(missing_ok=True)
        # Deepest first; a folder the compiler wrote into is kept.
        for folder in sorted(created_dirs, key=lambda f: len(f.parts), reverse=True):
            if folder.is_dir() and not any(folder.iterdir()):
                folder.rmdir()


def run_build(
    config: ProjectConfig,
    compiler: ExternalCompiler,
    settings: ReimportSettings | None = None,
    kind: BuildKind = BuildKind.FULL,
) -> BuildJob:
    job = BuildJob(kind=kind)
    logger.info("Compiling project %s", config.mod_info.id)

    try:
        copy_scope_files(config)
        copy_assets(config)
        copy_runtime_libraries(config)
        write_manifest(config.mod_out_dir / MANIFEST_NAME, config.mod_info)

        with scope_markers(config):
            units = compiler.compile(config)
            results = emit_units(units, config, settings)
    except OSError as exc:
        raise FileSystemError(str(exc), getattr(exc, "filename", None)) from exc

    for result in results:
        if result.path is not None:
            job.written.append(result.path)
        else:
            job.skipped.append(result.unit.declared_path)
        job.warnings.extend(result.warnings)

    job.finish()
    logger.info(
        "Compilation complete. Took %.3f second(s). Wrote %d file(s), skipped %d.",
        job.elapsed,
        len(job.written),
        len(job.skipped),
    )
    return job
