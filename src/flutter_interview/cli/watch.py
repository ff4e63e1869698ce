import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from flutter_interview.cli.check import render_report
from flutter_interview.cli.common import load
from flutter_interview.core.check import run_checks
from flutter_interview.core.corpus import load_corpus
from flutter_interview.watcher.watchfiles_adapter import WatchfilesWatcher

logger = logging.getLogger(__name__)
console = Console()


def watch(
    root: Annotated[Path | None, typer.Option("--root", "-C", help="Corpus root directory.")] = None,
) -> None:
    """Re-run the offline rules whenever a Markdown file changes."""
    corpus, settings = load(root)

    async def _on_change(paths: set[Path]) -> None:
        for path in sorted(paths):
            logger.debug("Changed: %s", path)
        report = run_checks(load_corpus(settings.root), settings)
        render_report(report, settings.strict)

    async def _run() -> None:
        render_report(run_checks(corpus, settings), settings.strict)
        watcher = WatchfilesWatcher(settings.root, _on_change, debounce=settings.watch_debounce)
        await watcher.start()
        console.print(f"Watching {settings.root} for changes (Ctrl+C to stop)...")
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("Stopped.")
