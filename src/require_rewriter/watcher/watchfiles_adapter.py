from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from watchfiles import Change, awatch

from require_rewriter.core.languages import SOURCE_EXTENSIONS
from require_rewriter.core.ports.watcher import ChangeHandler

logger = logging.getLogger(__name__)


def _is_source_file(path: Path) -> bool:
    return path.suffix in SOURCE_EXTENSIONS and "node_modules" not in path.parts


class WatchfilesWatcher:
    """Watch a directory for source-file changes and trigger a callback.

    Deleted files are not reported. Paths under ``ignore`` (typically the
    output directory) are skipped so rewritten files do not retrigger.

    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: ChangeHandler,
        ignore: str | Path | None = None,
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._ignore = Path(ignore).resolve() if ignore is not None else None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
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

    def _accepts(self, change: Change, path: Path) -> bool:
        if change == Change.deleted or not _is_source_file(path):
            return False
        return self._ignore is None or not path.resolve().is_relative_to(self._ignore)

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = {Path(p) for change, p in changes if self._accepts(change, Path(p))}
            if paths:
                logger.info("Detected changes in %d file(s)", len(paths))
                try:
                    await self._on_change(paths)
                except Exception:
                    logger.exception("Error in watcher callback")
