"""Bundle the project's type declarations into ``dist/<mod id>.d.ts``.

This is a beta feature. ``tsc`` writes one outFile; afterwards empty module
declarations are cut, hand-written ``.d.ts`` files from the scope folders are
appended, and the ``client/``, ``server/`` and ``shared/`` prefixes are removed
from module names so they match the runtime's flat namespaces.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from pipewrench_compiler.core.paths import normalize_path
from pipewrench_compiler.errors import ExternalCompilerFailure
from pipewrench_compiler.models import SCOPE_FOLDERS, ProjectConfig

logger = logging.getLogger(__name__)

HEADER = "/** @noResolution @noSelfInFile */"

_PREFIXED = ('declare module "', 'from "')


def declaration_path(config: ProjectConfig) -> Path:
    return config.out_dir / f"{config.mod_info.id}.d.ts"


def collect_declaration_files(config: ProjectConfig) -> dict[str, str]:
    files: dict[str, str] = {}
    for scope in SCOPE_FOLDERS:
        root = config.scope_src_dir(scope)
        if not root.is_dir():
            continue
        for path in sorted(root.rglob("*.d.ts")):
            key = normalize_path(path.relative_to(config.root))
            files[key] = path.read_text(encoding="utf-8")
    return files


def strip_scope_prefix(line: str) -> str:
    for opener in _PREFIXED:
        for scope in SCOPE_FOLDERS:
            prefixed = f"{opener}{scope.value}/"
            if prefixed in line:
                line = line.replace(prefixed, opener, 1)
                break
    return line


def aggregate_declarations(bundle: str, files: dict[str, str]) -> str | None:
    """Return the rewritten declaration bundle, or None when there is nothing to export."""
    lines = [
        line
        for line in bundle.splitlines()
        if line and not ("declare module " in line and "{ }" in line)
    ]
    if not lines and not files:
        return None

    out = [HEADER, "", *lines, ""]
    for path, content in files.items():
        out.append(f"/* File: {path} */")
        out.extend(content.splitlines())

    return "\r\n".join(strip_scope_prefix(line) for line in out) + "\r\n"


def build_declarations(config: ProjectConfig, command: list[str] | None = None) -> Path | None:
    target = declaration_path(config)
    command = command or ["npx", "tsc", "--declaration", "--emitDeclarationOnly", "--outFile", str(target)]
    logger.info("Compiling project declarations.. (file: %s)", target)

    try:
        result = subprocess.run(command, cwd=str(config.root), capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise ExternalCompilerFailure(f"Compiler not found: {command[0]}") from exc
    if result.returncode != 0:
        raise ExternalCompilerFailure(
            f"tsc exited with status {result.returncode}", (result.stdout + result.stderr).strip(), result.returncode
        )

    bundle = target.read_text(encoding="utf-8") if target.exists() else ""
    text = aggregate_declarations(bundle, collect_declaration_files(config))
    if text is None:
        logger.info("No declarations to export.")
        target.unlink(missing_ok=True)
        return None

    logger.info("Refactoring project declarations..")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8", newline="")
    return target
