import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from flutter_interview.cli.author import new, renumber
from flutter_interview.cli.check import check
from flutter_interview.cli.stats import stats
from flutter_interview.cli.toc import toc
from flutter_interview.cli.watch import watch

app = typer.Typer(
    name="flutter-interview",
    help="Flutter Interview Questions 2026: content-integrity checks and authoring helpers.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app.command("check")(check)
app.command("stats")(stats)
app.command("toc")(toc)
app.command("new")(new)
app.command("renumber")(renumber)
app.command("watch")(watch)


def main() -> None:
    app()
