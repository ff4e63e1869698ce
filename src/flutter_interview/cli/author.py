from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flutter_interview.cli.common import load
from flutter_interview.core.authoring import (
    add_question,
    apply_plan,
    collides_with_next_level,
    next_number,
    renumber_corpus,
    scaffold_question,
)
from flutter_interview.core.levels import normalize_level

console = Console()


def new(
    level: Annotated[str, typer.Argument(help="Level the question belongs to.")],
    title: Annotated[str, typer.Argument(help="Question title, without the number.")],
    root: Annotated[Path | None, typer.Option("--root", "-C", help="Corpus root directory.")] = None,
    section: Annotated[str | None, typer.Option(help="Section to append to (default: the last one).")] = None,
    language: Annotated[str, typer.Option(help="Fence label for the example code block.")] = "dart",
    write: Annotated[bool, typer.Option(help="Insert the question into the level file.")] = False,
) -> None:
    """Scaffold a new question entry numbered after the level's last question."""
    corpus, _ = load(root)
    try:
        slug = normalize_level(level)
        number = next_number(corpus, slug)
        block = scaffold_question(number, title, language)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    if collides_with_next_level(corpus, slug, number):
        console.print(
            f"[yellow]Question {number} is already used by a later level; "
            "run 'flutter-interview renumber --write' afterwards.[/yellow]"
        )

    if not write:
        typer.echo(block)
        return

    document = corpus.level(slug)
    try:
        updated = add_question(corpus, slug, title, section=section, language=language)
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None
    assert document is not None
    (corpus.root / document.path).write_text(updated, encoding="utf-8")
    console.print(f"[green]Added[/green] question {number} to {document.path}")


def renumber(
    root: Annotated[Path | None, typer.Option("--root", "-C", help="Corpus root directory.")] = None,
    write: Annotated[bool, typer.Option(help="Apply the changes instead of only listing them.")] = False,
) -> None:
    """Renumber questions 1..N in level order and refresh TOCs and index ranges."""
    corpus, _ = load(root)
    plan = renumber_corpus(corpus)

    if not plan.changed:
        console.print("Question numbers are already contiguous.")
    else:
        table = Table(show_lines=False)
        for header in ("file", "old", "new"):
            table.add_column(header)
        for path, old, new_number in plan.changes:
            table.add_row(path, str(old), str(new_number))
        console.print(table)
        console.print(f"({len(plan.changes)} renumbered)")

    if not plan.files:
        return
    if not write:
        console.print(f"{len(plan.files)} file(s) would change; pass --write to apply.")
        return
    for path in apply_plan(corpus, plan):
        console.print(f"[green]Rewrote[/green] {path}")
