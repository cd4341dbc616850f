from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

from pipewrench_compiler.core.paths import normalize_path
from pipewrench_compiler.errors import ExternalCompilerFailure
from pipewrench_compiler.models import CompiledUnit, ProjectConfig

logger = logging.getLogger(__name__)

_TSCONFIG = "tsconfig.json"


def build_command(config: ProjectConfig, out_dir: Path) -> list[str]:
    return [
        *config.settings.compiler,
        "-p",
        str(config.root / _TSCONFIG),
        "--rootDir",
        str(config.src_dir),
        "--outDir",
        str(out_dir),
        "--luaTarget",
        "5.1",
        "--declaration",
        "false",
    ]


def collect_units(out_dir: Path) -> list[CompiledUnit]:
    units = []
    for path in sorted(p for p in out_dir.rglob("*") if p.is_file()):
        declared = normalize_path(path.relative_to(out_dir))
        units.append(CompiledUnit(declared, path.read_text(encoding="utf-8")))
    return units


class TstlCompiler:
    """Runs TypeScriptToLua into a staging directory and reads back what it emitted.

    Implements the ``ExternalCompiler`` protocol.
    """

    def compile(self, config: ProjectConfig) -> list[CompiledUnit]:
        with tempfile.TemporaryDirectory(prefix="pipewrench-") as staging:
            out_dir = Path(staging)
            command = build_command(config, out_dir)
            logger.debug("Running %s", " ".join(command))
            try:
                result = subprocess.run(
                    command,
                    cwd=str(config.root),
                    capture_output=True,
                    text=True,
                )
            except FileNotFoundError as exc:
                raise ExternalCompilerFailure(f"Compiler not found: {command[0]}") from exc

            output = "\n".join(part for part in (result.stdout.strip(), result.stderr.strip()) if part)
            if result.returncode != 0:
                raise ExternalCompilerFailure(
                    f"Compiler exited with status {result.returncode}", output, result.returncode
                )
            if output:
                logger.info("%s", output)
            units = collect_units(out_dir)
        logger.info("Compiler emitted %d file(s)", len(units))
        return units
