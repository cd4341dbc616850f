from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from pipewrench_compiler.core.build import copy_file, is_source_file
from pipewrench_compiler.core.paths import mirror_source_path, relative_to_root, to_output_suffix
from pipewrench_compiler.errors import PipeWrenchError
from pipewrench_compiler.models import FileEvent, FileEventKind, ProjectConfig

logger = logging.getLogger(__name__)

_SENTINELS = frozenset({"header.lua", "footer.lua"})


class RebuildQueue:
    """Serializes builds; requests made while a build runs collapse into one more build."""

    def __init__(self, build: Callable[[], object]) -> None:
        self._build = build
        self._lock = asyncio.Lock()
        self._pending = False
        self.runs = 0

    async def request(self) -> None:
        self._pending = True
        if self._lock.locked():
            return
        async with self._lock:
            while self._pending:
                self._pending = False
                self.runs += 1
                try:
                    await asyncio.to_thread(self._build)
                except PipeWrenchError as exc:
                    logger.error("Build failed: %s", exc)


class WatchSession:
    """Applies file events from the source tree to the output tree."""

    def __init__(self, config: ProjectConfig, build: Callable[[], object]) -> None:
        self._config = config
        self.queue = RebuildQueue(build)

    def _is_sentinel(self, path: Path) -> bool:
        rel = relative_to_root(self._config, path)
        if rel is None:
            return False
        src = relative_to_root(self._config, self._config.src_dir)
        return rel.parent == src and rel.name.lower() in _SENTINELS

    def _needs_build(self, event: FileEvent) -> bool:
        name = event.path.name.lower()
        return is_source_file(event.path) and not name.endswith(".d.ts")

    def apply(self, event: FileEvent) -> bool:
        """Handle one event; returns True when it requires a full rebuild."""
        if self._is_sentinel(event.path):
            return False

        if event.kind in (FileEventKind.ADDED, FileEventKind.CHANGED):
            if not event.path.is_file():
                return False
            if self._needs_build(event):
                logger.info("File changed: %s", event.path)
                return True
            if is_source_file(event.path):
                return False
            destination = mirror_source_path(self._config, event.path)
            if destination is not None:
                copy_file(event.path, destination)
                logger.info('Copied "%s" to "%s"', event.path, destination)
            return False

        destination = mirror_source_path(self._config, event.path)
        if destination is None:
            return False

        if event.kind is FileEventKind.REMOVED:
            destination = to_output_suffix(destination)
            if destination.is_file():
                destination.unlink()
                logger.info("Deleted file: %s", destination)
        elif event.kind is FileEventKind.DIR_REMOVED:
            if destination.is_dir():
                shutil.rmtree(destination)
                logger.info("Deleted directory: %s", destination)
        elif event.kind is FileEventKind.DIR_ADDED:
            if not destination.exists():
                destination.mkdir(parents=True, exist_ok=True)
                logger.info("Created directory: %s", destination)
        return False

    async def handle(self, events: Iterable[FileEvent]) -> None:
        rebuild = False
        for event in events:
            try:
                rebuild = self.apply(event) or rebuild
            except (OSError, PipeWrenchError) as exc:
                logger.error("Could not apply %s for %s: %s", event.kind.value, event.path, exc)
        if rebuild:
            await self.queue.request()
