"""Maintainer helpers: scaffolding new questions and renumbering the corpus."""

import logging
import re
from dataclasses import dataclass, field

from flutter_interview.core.corpus import (
    DECLARED_RANGE_RE,
    TOC_HEADING,
    Corpus,
    parse_index_document,
    parse_level_document,
)
from flutter_interview.core.levels import INDEX_FILE, LEVELS, level_position, normalize_level
from flutter_interview.core.markdown import parse_markdown, strip_inline_markup
from flutter_interview.core.toc import render_toc, replace_toc

logger = logging.getLogger(__name__)

_QUESTION_LINE_RE = re.compile(r"^(\s{0,3}###\s+)(\d+)(\.\s+)")
_CELL_SEPARATOR_RE = re.compile(r"(?<!\\)\|")

QUESTION_TEMPLATE = """\
### {number}. {title}

Explain the concept in two or three sentences before showing any code.

```{language}
// Minimal example that demonstrates the idea.
```

#### Common Mistakes

- Describe the mistake candidates make most often.

#### Interview Follow-up

> What would you ask next to probe deeper?
"""


def scaffold_question(number: int, title: str, language: str = "dart") -> str:
    """Render a new question entry following theory, code, mistakes, follow-up."""
    if number < 1:
        raise ValueError(f"Question number must be positive, got {number}")
    title = title.strip()
    if not title:
        raise ValueError("Question title must not be empty")
    return QUESTION_TEMPLATE.format(number=number, title=title, language=language.strip().lower())


def next_number(corpus: Corpus, level: str) -> int:
    """Number the next question appended to *level* would take."""
    slug = normalize_level(level)
    for candidate in reversed(LEVELS[: level_position(slug) + 1]):
        document = corpus.level(candidate.slug)
        if document is not None and document.questions:
            return document.questions[-1].number + 1
    return 1


def insert_question(text: str, block: str, section: str | None = None) -> str:
    """Insert *block* at the end of *section* (default: the last section holding questions)."""
    document = parse_markdown(text)
    lines = list(document.lines)
    headings = document.headings
    sections = [h for h in headings if h.depth == 2 and h.text.strip().lower() != TOC_HEADING]

    if section is not None:
        target = next((h for h in sections if h.text.strip().lower() == section.strip().lower()), None)
        if target is None:
            raise ValueError(f"Section '{section}' not found. Available: {[h.text for h in sections]}")
    else:
        last_question = next(
            (h for h in reversed(headings) if h.depth == 3 and re.match(r"\d+\.\s", h.text)),
            None,
        )
        target = None
        if last_question is not None:
            target = next((h for h in reversed(sections) if h.line < last_question.line), None)

    if target is None:
        end = len(lines)
    else:
        end = next((h.line - 1 for h in headings if h.line > target.line and h.depth <= 2), len(lines))
    stop = end
    while end > 0 and not lines[end - 1].strip():
        end -= 1

    # Trailing blank lines of the section collapse into the single separator below.
    lines[end:stop] = ["", *block.rstrip("\n").splitlines(), ""]
    result = "\n".join(lines)
    return result + "\n" if text.endswith("\n") else result


def add_question(corpus: Corpus, level: str, title: str, section: str | None = None, language: str = "dart") -> str:
    """Return the new text of *level*'s file with a scaffolded question appended and its TOC refreshed."""
    slug = normalize_level(level)
    document = corpus.level(slug)
    if document is None:
        raise FileNotFoundError(f"Level file for {slug} is missing")
    number = next_number(corpus, slug)
    text = (corpus.root / document.path).read_text(encoding="utf-8")
    updated = insert_question(text, scaffold_question(number, title, language), section)
    reparsed = parse_level_document(updated, document.path, slug)
    logger.debug("Scaffolded question %d in %s", number, document.path)
    return replace_toc(updated, render_toc(reparsed))


def collides_with_next_level(corpus: Corpus, level: str, number: int) -> bool:
    position = level_position(level)
    for later in LEVELS[position + 1 :]:
        document = corpus.level(later.slug)
        if document is not None and document.questions:
            return document.questions[0].number <= number
    return False


@dataclass
class RenumberPlan:
    changes: list[tuple[str, int, int]] = field(default_factory=list)
    files: dict[str, str] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def _replace_cell(line: str, column: int, value: str) -> str:
    """Swap the content of one pipe-table cell, keeping its padding."""
    segments = _CELL_SEPARATOR_RE.split(line)
    position = column + 1 if line.lstrip().startswith("|") else column
    if position >= len(segments):
        return line
    old = segments[position]
    leading = old[: len(old) - len(old.lstrip())] or " "
    segments[position] = f"{leading}{value} ".ljust(len(old))
    return "|".join(segments)


def _rewrite_index_ranges(text: str, ranges: dict[str, tuple[int, int]]) -> str:
    """Rewrite the question range of index rows whose range changed; other rows stay byte-for-byte."""
    index = parse_index_document(text)
    lines = text.splitlines()
    for table in index.document.tables:
        headers = [strip_inline_markup(h).strip().lower() for h in table.headers]
        if "level" in headers and "questions" in headers:
            column = headers.index("questions")
            break
    else:
        return text
    for row in index.rows:
        if row.level not in ranges or (row.first, row.last) == ranges[row.level]:
            continue
        first, last = ranges[row.level]
        lines[row.line - 1] = _replace_cell(lines[row.line - 1], column, f"{first}-{last}")
    result = "\n".join(lines)
    return result + "\n" if text.endswith("\n") else result


def renumber_corpus(corpus: Corpus) -> RenumberPlan:
    """Plan a renumbering so questions run 1..N in level order.

    Headings, each level's TOC and declared range, and the index table's ranges
    are rewritten. Nothing is written to disk; see ``apply_plan``.
    """
    plan = RenumberPlan()
    ranges: dict[str, tuple[int, int]] = {}
    counter = 1

    for document in corpus.levels:
        original = (corpus.root / document.path).read_text(encoding="utf-8")
        lines = original.splitlines()
        first = counter
        for question in document.questions:
            if question.number != counter:
                plan.changes.append((document.path, question.number, counter))
                lines[question.line - 1] = _QUESTION_LINE_RE.sub(
                    lambda m, n=counter: f"{m.group(1)}{n}{m.group(3)}", lines[question.line - 1], count=1
                )
            counter += 1
        if document.questions:
            ranges[document.level] = (first, counter - 1)
            for i, line in enumerate(lines):
                if DECLARED_RANGE_RE.search(line):
                    lines[i] = DECLARED_RANGE_RE.sub(f"**Questions:** {first}-{counter - 1}", line, count=1)
                    break

        updated = "\n".join(lines) + ("\n" if original.endswith("\n") else "")
        reparsed = parse_level_document(updated, document.path, document.level)
        updated = replace_toc(updated, render_toc(reparsed))
        if updated != original:
            plan.files[document.path] = updated

    if corpus.index is not None:
        original = (corpus.root / INDEX_FILE).read_text(encoding="utf-8")
        updated = _rewrite_index_ranges(original, ranges)
        if updated != original:
            plan.files[INDEX_FILE] = updated

    return plan


def apply_plan(corpus: Corpus, plan: RenumberPlan) -> list[str]:
    for path, text in plan.files.items():
        (corpus.root / path).write_text(text, encoding="utf-8")
        logger.info("Rewrote %s", path)
    return list(plan.files)
