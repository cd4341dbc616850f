import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from pipewrench_compiler.cli.build import build, build_declarations
from pipewrench_compiler.cli.init import init
from pipewrench_compiler.cli.watch import watch

app = typer.Typer(
    name="pipewrench",
    help="PipeWrench compiler: build TypeScriptToLua output into a Project Zomboid mod.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug output.")] = False,
) -> None:
    logger = logging.getLogger("pipewrench_compiler")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, log_time_format="[%X]")
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


app.command("init")(init)
app.command("build")(build)
app.command("watch")(watch)
app.command("build-declarations")(build_declarations)


def main() -> None:
    app()
