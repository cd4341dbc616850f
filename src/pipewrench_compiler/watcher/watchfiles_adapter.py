from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from pipewrench_compiler.models import FileEvent, FileEventKind

logger = logging.getLogger(__name__)


class WatchfilesWatcher:
    """Watch a source tree and hand each batch of file events to a callback.

    Implements the ``FileWatcherPort`` protocol. Files that already exist when
    the watcher starts produce no events.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: Callable[[list[FileEvent]], Coroutine[Any, Any, None]],
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None
        self._known_dirs: set[Path] = set()

    async def start(self) -> None:
        if self._task is not None:
            return
        if self._directory.is_dir():
            self._known_dirs = {p for p in self._directory.resolve().rglob("*") if p.is_dir()}
        self._task = asyncio.create_task(self._watch())
        logger.info("Watcher started for %s", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Watcher stopped for %s", self._directory)

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    def to_event(self, change: Change, raw_path: str) -> FileEvent:
        path = Path(raw_path)
        if change == Change.deleted:
            if path in self._known_dirs:
                self._known_dirs = {d for d in self._known_dirs if d != path and path not in d.parents}
                return FileEvent(FileEventKind.DIR_REMOVED, path)
            return FileEvent(FileEventKind.REMOVED, path)
        if path.is_dir():
            if path in self._known_dirs:
                return FileEvent(FileEventKind.CHANGED, path)
            self._known_dirs.add(path)
            return FileEvent(FileEventKind.DIR_ADDED, path)
        if change == Change.added:
            return FileEvent(FileEventKind.ADDED, path)
        return FileEvent(FileEventKind.CHANGED, path)

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            # Parents sort before children so new directories are known first.
            events = [self.to_event(change, raw) for change, raw in sorted(changes, key=lambda c: c[1])]
            if events:
                logger.info("Detected changes in %d path(s)", len(events))
                try:
                    await self._on_change(events)
                except Exception:
                    logger.exception("Error in watcher callback")
