from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from flutter_interview.config import Settings, get_settings
from flutter_interview.core.corpus import Corpus, load_corpus

console = Console()


def load(root: Path | None, **overrides: object) -> tuple[Corpus, Settings]:
    """Resolve settings and load the corpus, turning setup errors into exit code 1."""
    try:
        settings = get_settings(root=root, **overrides)
        corpus = load_corpus(settings.root)
    except ValidationError as exc:
        console.print(f"[red]Invalid settings:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from None
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None
    return corpus, settings
