from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from flutter_interview.cli.common import load
from flutter_interview.core.stats import collect_stats

console = Console()


def stats(
    root: Annotated[Path | None, typer.Option("--root", "-C", help="Corpus root directory.")] = None,
) -> None:
    """Summarise questions, sections, code blocks and links per level."""
    corpus, _ = load(root)
    result = collect_stats(corpus)

    levels = Table(title="Levels")
    for header in ("level", "questions", "range", "sections", "code blocks", "mistakes", "follow-ups"):
        levels.add_column(header)
    for level in result.levels:
        span = f"{level.first}-{level.last}" if level.first is not None else "-"
        levels.add_row(
            level.level,
            str(level.questions),
            span,
            ", ".join(level.sections),
            str(level.code_blocks),
            str(level.with_common_mistakes),
            str(level.with_follow_up),
        )
    console.print(levels)

    languages = Table(title="Code blocks by language")
    languages.add_column("language")
    languages.add_column("blocks")
    for language, count in result.code_languages.items():
        languages.add_row(language, str(count))
    console.print(languages)

    console.print(
        f"{result.total_questions} question(s), {result.relative_links} relative link(s), "
        f"{result.external_links} external link(s), {result.images} image(s)"
    )
