from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from flutter_interview.cli.common import load
from flutter_interview.core.levels import resolve_level
from flutter_interview.core.toc import render_toc, replace_toc

console = Console()


def toc(
    level: Annotated[
        str, typer.Argument(help="Level name (junior, mid-level, senior, expert) or path to its README.md.")
    ],
    root: Annotated[Path | None, typer.Option("--root", "-C", help="Corpus root directory.")] = None,
    write: Annotated[bool, typer.Option(help="Rewrite the level file's Table of Contents in place.")] = False,
) -> None:
    """Print, or rewrite, a level's table of contents generated from its headings."""
    corpus, _ = load(root)
    try:
        slug = resolve_level(None if level.endswith(".md") else level, Path(level))
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    document = corpus.level(slug)
    if document is None:
        console.print(f"[red]Level file for {slug} is missing.[/red]")
        raise typer.Exit(1)

    rendered = render_toc(document)
    if not write:
        typer.echo(rendered)
        return

    path = corpus.root / document.path
    original = path.read_text(encoding="utf-8")
    updated = replace_toc(original, rendered)
    if updated == original:
        console.print(f"Table of contents in {document.path} is up to date.")
        return
    path.write_text(updated, encoding="utf-8")
    console.print(f"[green]Rewrote[/green] table of contents in {document.path}")
