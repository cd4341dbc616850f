from typing import Annotated

import typer

from pipewrench_compiler.cli.common import console, run_or_exit
from pipewrench_compiler.compiler.tstl_adapter import TstlCompiler
from pipewrench_compiler.core.build import run_build
from pipewrench_compiler.core.config import load_project_config
from pipewrench_compiler.core.declarations import build_declarations as _build_declarations
from pipewrench_compiler.models import BuildJob


def _build(path: str) -> BuildJob:
    config = load_project_config(path)
    return run_build(config, TstlCompiler())


def build(
    path: Annotated[str, typer.Argument(help="Location of the mod project.")] = ".",
) -> None:
    """Run one full build pass."""
    console.print("[bright_green]Compiling project..[/bright_green]")
    job = run_or_exit(lambda: _build(path))
    console.print(
        f"[bright_green]Compilation complete. Took {job.elapsed:.3f} second(s).[/bright_green] "
        f"({len(job.written)} written, {len(job.skipped)} skipped, {len(job.warnings)} warning(s))"
    )


def build_declarations(
    path: Annotated[str, typer.Argument(help="Location of the mod project.")] = ".",
) -> None:
    """Bundle the project's type declarations into one .d.ts file (beta)."""
    target = run_or_exit(lambda: _build_declarations(load_project_config(path)))
    if target is None:
        console.print("[grey50]No declarations to export.[/grey50]")
    else:
        console.print(f"[green]Wrote[/green] {target}")
