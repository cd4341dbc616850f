from collections.abc import Callable
from typing import TypeVar

import typer
from rich.console import Console

from pipewrench_compiler.errors import PipeWrenchError

console = Console()

T = TypeVar("T")


def run_or_exit(action: Callable[[], T]) -> T:
    """Run a command body, turning fatal build errors into exit status 1."""
    try:
        return action()
    except PipeWrenchError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(1) from exc
