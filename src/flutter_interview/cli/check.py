import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flutter_interview.cli.common import load
from flutter_interview.config import Settings
from flutter_interview.core.check import run_full_check, select_rules
from flutter_interview.core.ports.probe import LinkProbe
from flutter_interview.core.rules import EXTERNAL_RULE
from flutter_interview.models import CheckReport

console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow"}


def _get_probe(settings: Settings) -> LinkProbe:
    from flutter_interview.probe.aiohttp_adapter import AiohttpLinkProbe

    return AiohttpLinkProbe(timeout=settings.external_timeout)


def render_report(report: CheckReport, strict: bool = False) -> None:
    if report.issues:
        table = Table(show_lines=False)
        for header in ("location", "severity", "rule", "message"):
            table.add_column(header)
        for issue in report.issues:
            style = _SEVERITY_STYLE[issue.severity]
            table.add_row(issue.location(), f"[{style}]{issue.severity}[/{style}]", issue.rule, escape(issue.message))
        console.print(table)
    summary = f"{report.errors} error(s), {report.warnings} warning(s) in {len(report.checked_files)} file(s)"
    if report.passed(strict):
        console.print(f"[green]Passed[/green] {summary}")
    else:
        console.print(f"[red]Failed[/red] {summary}")


def check(
    root: Annotated[Path | None, typer.Option("--root", "-C", help="Corpus root directory.")] = None,
    rule: Annotated[list[str] | None, typer.Option("--rule", "-r", help="Run only this rule (repeatable).")] = None,
    strict: Annotated[bool, typer.Option(help="Treat warnings as failures.")] = False,
    external: Annotated[bool, typer.Option(help="Also probe http(s) links, badges included.")] = False,
    expected_total: Annotated[int | None, typer.Option(help="Number of questions the corpus must hold.")] = None,
    output_format: Annotated[str, typer.Option("--format", help="Output format: text or json.")] = "text",
) -> None:
    """Run the content-integrity rules over the corpus."""
    if output_format not in {"text", "json"}:
        console.print(f"[red]Unknown format '{output_format}'. Supported: ['json', 'text'][/red]")
        raise typer.Exit(1)

    corpus, settings = load(root, strict=True if strict else None, expected_total=expected_total)
    try:
        rules = select_rules(rule)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    probe = _get_probe(settings) if external or EXTERNAL_RULE in rules else None
    report = asyncio.run(run_full_check(corpus, settings, probe=probe, rules=rule))

    if output_format == "json":
        typer.echo(report.model_dump_json(indent=2))
    else:
        render_report(report, settings.strict)

    if not report.passed(settings.strict):
        raise typer.Exit(1)
