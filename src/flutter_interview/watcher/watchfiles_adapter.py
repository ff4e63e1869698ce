from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine, Sequence
from pathlib import Path
from typing import Any

from watchfiles import Change, DefaultFilter, awatch

logger = logging.getLogger(__name__)

_MARKDOWN_EXTENSIONS: frozenset[str] = frozenset({".md", ".markdown"})

DEFAULT_DEBOUNCE_MS = 1600


def _is_markdown_file(path: Path) -> bool:
    return path.suffix.lower() in _MARKDOWN_EXTENSIONS


class MarkdownFilter(DefaultFilter):
    """Pass Markdown files only, on top of the default ignore rules (``.git``, editor swap files)."""

    def __init__(
        self,
        *,
        ignore_paths: Sequence[str | Path] | None = None,
        extra_extensions: Sequence[str] = (),
    ) -> None:
        self.extensions = tuple(_MARKDOWN_EXTENSIONS) + tuple(e.lower() for e in extra_extensions)
        super().__init__(ignore_paths=ignore_paths)

    def __call__(self, change: Change, path: str) -> bool:
        return path.lower().endswith(self.extensions) and super().__call__(change, path)


class WatchfilesWatcher:
    """Watch a corpus directory for Markdown changes and trigger a callback.

    Bursts of saves within *debounce* milliseconds arrive as one batch, so a
    renumbering that touches every level file re-checks the corpus once.
    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: Callable[[set[Path]], Coroutine[Any, Any, None]],
        *,
        debounce: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._debounce = debounce
        self._filter = MarkdownFilter()
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watcher started for %s (debounce %d ms)", self._directory, self._debounce)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Watcher stopped for %s", self._directory)

    async def wait(self) -> None:
        """Block until the watch task ends."""
        if self._task is not None:
            await self._task

    async def _watch(self) -> None:
        async for changes in awatch(self._directory, watch_filter=self._filter, debounce=self._debounce):
            paths = {Path(p) for _, p in changes if _is_markdown_file(Path(p))}
            if paths:
                logger.info("Detected changes in %d Markdown file(s)", len(paths))
                try:
                    await self._on_change(paths)
                except Exception:
                    logger.exception("Error in watcher callback")
