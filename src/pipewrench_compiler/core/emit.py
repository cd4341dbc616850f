from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from pipewrench_compiler.core.output_paths import LUALIB_BUNDLE, resolve_output_path
from pipewrench_compiler.core.reimport import ReimportSettings, apply_reimport
from pipewrench_compiler.core.references import rewrite_references
from pipewrench_compiler.errors import FileSystemError
from pipewrench_compiler.models import CompiledUnit, ProjectConfig

logger = logging.getLogger(__name__)

# Runtime support files are written exactly as emitted.
PASSTHROUGH_FILES: frozenset[str] = frozenset(
    {LUALIB_BUNDLE, "PipeWrench.lua", "PipeWrench-Events.lua", "PipeWrench-Utils.lua"}
)

_DECLARATION_SUFFIXES = (".d.ts", ".d.lua")


@dataclass
class EmitResult:
    unit: CompiledUnit
    path: Path | None = None
    skipped: str | None = None
    warnings: list[Warning] = field(default_factory=list)


def is_declaration_only(unit: CompiledUnit) -> bool:
    return unit.declared_path.lower().endswith(_DECLARATION_SUFFIXES)


def transform_unit(unit: CompiledUnit, settings: ReimportSettings) -> list[Warning]:
    """Rewrite references then inject the reimport block, updating ``unit.text`` in place."""
    if unit.declared_path.rsplit("/", 1)[-1] in PASSTHROUGH_FILES:
        return []
    rewritten = rewrite_references(unit.scope, unit.text)
    unit.text = apply_reimport(rewritten.text, settings)
    return rewritten.warnings


def write_output(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="")
    except OSError as exc:
        raise FileSystemError(f"Could not write {path}: {exc}", path) from exc


def emit_unit(unit: CompiledUnit, config: ProjectConfig, settings: ReimportSettings | None = None) -> EmitResult:
    if not unit.text:
        return EmitResult(unit, skipped="empty")
    if is_declaration_only(unit):
        return EmitResult(unit, skipped="declaration")

    path = resolve_output_path(unit.declared_path, config)
    warnings = transform_unit(unit, settings or ReimportSettings())
    write_output(path, unit.text)
    logger.debug("Wrote %s -> %s", unit.declared_path, path)
    return EmitResult(unit, path=path, warnings=warnings)


def emit_units(
    units: Iterable[CompiledUnit], config: ProjectConfig, settings: ReimportSettings | None = None
) -> list[EmitResult]:
    settings = settings or ReimportSettings()
    return [emit_unit(unit, config, settings) for unit in units]
