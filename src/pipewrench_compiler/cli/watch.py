import asyncio
import functools
from typing import Annotated

import typer

from pipewrench_compiler.cli.common import console, run_or_exit
from pipewrench_compiler.compiler.tstl_adapter import TstlCompiler
from pipewrench_compiler.core.build import run_build
from pipewrench_compiler.core.config import load_project_config
from pipewrench_compiler.core.watch import WatchSession
from pipewrench_compiler.models import BuildKind, ProjectConfig
from pipewrench_compiler.watcher.watchfiles_adapter import WatchfilesWatcher


def _rebuild(config: ProjectConfig) -> None:
    # mod.info may have been edited since the session started.
    current = load_project_config(config.root)
    run_build(current, TstlCompiler(), kind=BuildKind.INCREMENTAL)


def watch(
    path: Annotated[str, typer.Argument(help="Location of the mod project.")] = ".",
) -> None:
    """Rebuild the mod whenever the source tree changes."""
    config = run_or_exit(lambda: load_project_config(path))
    session = WatchSession(config, functools.partial(_rebuild, config))
    watcher = WatchfilesWatcher(config.src_dir, session.handle)

    async def _run() -> None:
        await watcher.start()
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    console.print(f"[green]Watching[/green] {config.src_dir} (Ctrl+C to stop)")
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("Stopped watching.")
