"""Shared fixtures and helpers for tests."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from flutter_interview.config import Settings
from flutter_interview.core.corpus import Corpus, load_corpus
from flutter_interview.core.levels import LEVELS, get_level, neighbours
from flutter_interview.core.markdown import slugify

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Sample corpus: two questions per level, eight in total, every rule passing
# ---------------------------------------------------------------------------

SAMPLE_TOTAL = 8

SAMPLE_QUESTIONS: dict[str, list[tuple[int, str]]] = {
    "junior": [(1, "What is a widget?"), (2, "What is `BuildContext`?")],
    "mid-level": [(3, "What is Provider?"), (4, "What is an isolate?")],
    "senior": [(5, "What is clean architecture?"), (6, "What is a platform channel?")],
    "expert": [(7, "What is an element?"), (8, "What is Impeller?")],
}


def navigation_line(slug: str) -> str:
    previous, following = neighbours(slug)
    links = ["[Back to index](../README.md)"]
    if previous is not None:
        links.append(f"[Previous: {previous.title}](../{previous.relative_path})")
    if following is not None:
        links.append(f"[Next: {following.title}](../{following.relative_path})")
    return " | ".join(links)


def render_level(slug: str, questions: list[tuple[int, str]], section: str = "Basics") -> str:
    level = get_level(slug)
    nav = navigation_line(slug)
    toc = [f"- **{section}**"]
    toc.extend(f"  - [{number}. {title}](#{slugify(f'{number}. {title}')})" for number, title in questions)

    body: list[str] = []
    for number, title in questions:
        body.extend(
            [
                f"### {number}. {title}",
                "",
                f"Theory for question {number}.",
                "",
                "```dart",
                f"void question{number}() {{}}",
                "```",
                "",
                "#### Common Mistakes",
                "",
                "- Forgetting the basics.",
                "",
            ]
        )

    lines = [
        f"# Flutter Interview Questions 2026: {level.title}",
        "",
        nav,
        "",
        f"> **Experience:** {level.experience}",
        ">",
        f"> **Questions:** {questions[0][0]}-{questions[-1][0]}",
        "",
        "## Table of Contents",
        "",
        *toc,
        "",
        f"## {section}",
        "",
        *body,
        "## Navigation",
        "",
        nav,
    ]
    return "\n".join(lines) + "\n"


def render_index(questions: dict[str, list[tuple[int, str]]]) -> str:
    lines = [
        "# Flutter Interview Questions 2026",
        "",
        "| Level | Experience | Questions | Topics |",
        "|-------|------------|-----------|--------|",
    ]
    for level in LEVELS:
        entries = questions.get(level.slug)
        if not entries:
            continue
        lines.append(
            f"| [{level.title}]({level.relative_path}) | {level.experience} "
            f"| {entries[0][0]}-{entries[-1][0]} | Basics |"
        )
    return "\n".join(lines) + "\n"


def replace_in(path: Path, old: str, new: str) -> None:
    """Edit a corpus file in place; fails loudly when *old* is absent."""
    text = path.read_text(encoding="utf-8")
    assert old in text, f"{old!r} not found in {path}"
    path.write_text(text.replace(old, new), encoding="utf-8")


@pytest.fixture
def write_corpus() -> Callable[..., Path]:
    """Factory writing a sample corpus under a root directory."""

    def _write(root: Path, questions: dict[str, list[tuple[int, str]]] | None = None) -> Path:
        questions = questions or SAMPLE_QUESTIONS
        root.mkdir(parents=True, exist_ok=True)
        (root / "README.md").write_text(render_index(questions), encoding="utf-8")
        for level in LEVELS:
            if level.slug not in questions:
                continue
            path = root / level.relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(render_level(level.slug, questions[level.slug]), encoding="utf-8")
        logger.debug("Wrote sample corpus to %s", root)
        return root

    return _write


@pytest.fixture
def corpus_root(tmp_path: Path, write_corpus: Callable[..., Path]) -> Path:
    return write_corpus(tmp_path / "guide")


@pytest.fixture
def corpus(corpus_root: Path) -> Corpus:
    return load_corpus(corpus_root)


@pytest.fixture
def settings(corpus_root: Path) -> Settings:
    return Settings(root=corpus_root, expected_total=SAMPLE_TOTAL)


@pytest.fixture
def sample_questions() -> dict[str, list[tuple[int, str]]]:
    return {slug: list(entries) for slug, entries in SAMPLE_QUESTIONS.items()}


@pytest.fixture
def edit() -> Callable[[Path, str, str], None]:
    """Expose ``replace_in`` to tests without importing conftest."""
    return replace_in
