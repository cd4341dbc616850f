from typing import Annotated

import typer

from pipewrench_compiler.cli.common import console
from pipewrench_compiler.core.scaffold import init_project


def init(
    path: Annotated[str, typer.Argument(help="Location to create the mod.")] = ".",
) -> None:
    """Scaffold the source folders and a default mod.info."""
    created = init_project(path)
    for item in created:
        console.print(f"[green]Created[/green] {item}")
    if not created:
        console.print("[yellow]Nothing to do, project already initialized.[/yellow]")
