from collections.abc import Sequence

from flutter_interview.config import Settings
from flutter_interview.core.corpus import Corpus
from flutter_interview.core.external import run_external_checks
from flutter_interview.core.ports.probe import LinkProbe
from flutter_interview.core.rules import EXTERNAL_RULE, RULES, known_rules
from flutter_interview.models import CheckReport, Issue


def select_rules(names: Sequence[str] | None) -> list[str]:
    """Validate rule names; ``None`` selects every offline rule."""
    if not names:
        return list(RULES)
    unknown = [name for name in names if name not in known_rules()]
    if unknown:
        raise ValueError(f"Unknown rule(s) {unknown}. Supported: {known_rules()}")
    return list(dict.fromkeys(names))


def _sort_key(issue: Issue) -> tuple[str, int, str]:
    return issue.path, issue.line or 0, issue.rule


def run_checks(corpus: Corpus, settings: Settings, rules: Sequence[str] | None = None) -> CheckReport:
    """Run the selected offline rules over *corpus*.

    ``external`` may be named but is skipped here; see ``run_full_check``.
    """
    selected = select_rules(rules)
    issues: list[Issue] = []
    for name in selected:
        if name == EXTERNAL_RULE:
            continue
        issues.extend(RULES[name](corpus, settings))
    return CheckReport(
        issues=sorted(issues, key=_sort_key),
        checked_files=[doc.path for doc in corpus.documents()],
        rules=selected,
    )


async def run_full_check(
    corpus: Corpus,
    settings: Settings,
    probe: LinkProbe | None = None,
    rules: Sequence[str] | None = None,
) -> CheckReport:
    """Offline rules plus, when a probe is given, the external link rule."""
    report = run_checks(corpus, settings, rules)
    if probe is None:
        return report
    try:
        external = await run_external_checks(corpus, probe, settings.external_concurrency)
    finally:
        await probe.close()
    selected = report.rules if EXTERNAL_RULE in report.rules else [*report.rules, EXTERNAL_RULE]
    return CheckReport(
        issues=sorted([*report.issues, *external], key=_sort_key),
        checked_files=report.checked_files,
        rules=selected,
    )
