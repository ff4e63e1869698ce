"""Content-integrity rules.

Each rule takes the loaded corpus and the active settings and yields issues.
Rules never raise on authoring mistakes; they describe them.
"""

import posixpath
from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from pathlib import PurePosixPath
from urllib.parse import unquote

from flutter_interview.config import Settings
from flutter_interview.core.corpus import Corpus
from flutter_interview.core.levels import INDEX_FILE, LEVEL_FILE, LEVELS, neighbours
from flutter_interview.models import Issue

Rule = Callable[[Corpus, Settings], Iterable[Issue]]

RULES: dict[str, Rule] = {}

EXTERNAL_RULE = "external"


def rule(name: str) -> Callable[[Rule], Rule]:
    def register(func: Rule) -> Rule:
        RULES[name] = func
        return func

    return register


def known_rules() -> list[str]:
    return [*RULES, EXTERNAL_RULE]


def _error(rule_name: str, path: str, message: str, line: int | None = None) -> Issue:
    return Issue(rule=rule_name, severity="error", path=path, line=line, message=message)


def _warning(rule_name: str, path: str, message: str, line: int | None = None) -> Issue:
    return Issue(rule=rule_name, severity="warning", path=path, line=line, message=message)


def split_target(target: str) -> tuple[str, str]:
    """Split a link target into (path, fragment), dropping any query string."""
    path, _, fragment = target.partition("#")
    path = path.split("?", 1)[0]
    return unquote(path), unquote(fragment)


def resolve_target(source_path: str, target_path: str) -> str:
    """Root-relative POSIX path a link in *source_path* points at."""
    if target_path.startswith("/"):
        joined = target_path.lstrip("/")
    else:
        joined = posixpath.join(str(PurePosixPath(source_path).parent), target_path)
    return posixpath.normpath(joined)


def document_path(resolved: str) -> str:
    """Map a resolved target to the file GitHub renders for it; directories show their README."""
    if PurePosixPath(resolved).suffix:
        return resolved
    return posixpath.normpath(posixpath.join(resolved, LEVEL_FILE))


def format_ranges(numbers: Iterable[int]) -> str:
    """Collapse sorted numbers into ``1-3, 7`` form."""
    parts: list[str] = []
    run: list[int] = []
    for n in sorted(numbers):
        if run and n == run[-1] + 1:
            run.append(n)
            continue
        if run:
            parts.append(f"{run[0]}-{run[-1]}" if len(run) > 1 else str(run[0]))
        run = [n]
    if run:
        parts.append(f"{run[0]}-{run[-1]}" if len(run) > 1 else str(run[0]))
    return ", ".join(parts)


@rule("layout")
def check_layout(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    for path in corpus.missing:
        yield _error("layout", path, "required file is missing")


@rule("numbering")
def check_numbering(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    seen: dict[int, tuple[str, int]] = {}
    previous: int | None = None

    for level in corpus.levels:
        for question in level.questions:
            number = question.number
            if number in seen:
                first_path, first_line = seen[number]
                yield _error(
                    "numbering",
                    level.path,
                    f"question {number} is already defined at {first_path}:{first_line}",
                    question.line,
                )
            else:
                seen[number] = (level.path, question.line)
                if previous is not None and number <= previous:
                    yield _error(
                        "numbering",
                        level.path,
                        f"question {number} follows question {previous}; numbers must increase",
                        question.line,
                    )
            if not 1 <= number <= settings.expected_total:
                yield _error(
                    "numbering",
                    level.path,
                    f"question {number} is outside 1-{settings.expected_total}",
                    question.line,
                )
            previous = number

    if not seen:
        return
    missing = set(range(1, settings.expected_total + 1)) - set(seen)
    if missing:
        yield _error("numbering", INDEX_FILE, f"missing question numbers: {format_ranges(missing)}")


@rule("toc")
def check_toc(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    for level in corpus.levels:
        if not level.questions:
            continue
        if not level.toc:
            yield _error("toc", level.path, "table of contents is missing or lists no questions")
            continue

        heading_numbers = level.numbers
        toc_numbers = [entry.number for entry in level.toc]
        by_number = {q.number: q for q in level.questions}
        slugs = level.document.slugs()

        toc_counts = Counter(toc_numbers)
        for entry in level.toc:
            if toc_counts[entry.number] > 1:
                yield _error("toc", level.path, f"table of contents lists question {entry.number} twice", entry.line)
                toc_counts[entry.number] = 0
            elif entry.number not in by_number:
                yield _error(
                    "toc",
                    level.path,
                    f"table of contents lists question {entry.number} but no '### {entry.number}.' heading exists",
                    entry.line,
                )
        listed = set(toc_numbers)
        for question in level.questions:
            if question.number not in listed:
                yield _error(
                    "toc",
                    level.path,
                    f"question {question.number} has no table of contents entry",
                    question.line,
                )

        common = list(dict.fromkeys(n for n in toc_numbers if n in by_number))
        expected = [n for n in heading_numbers if n in listed]
        if common != expected:
            for entry_number, heading_number in zip(common, expected, strict=False):
                if entry_number != heading_number:
                    line = next(e.line for e in level.toc if e.number == entry_number)
                    yield _error(
                        "toc",
                        level.path,
                        "table of contents order differs from headings: "
                        f"found {entry_number}, expected {heading_number}",
                        line,
                    )
                    break

        for entry in level.toc:
            question = by_number.get(entry.number)
            if question is None:
                continue
            # Unknown anchors are reported by the links rule.
            if entry.anchor.lower() != question.slug and entry.anchor.lower() in slugs:
                yield _error(
                    "toc",
                    level.path,
                    f"entry {entry.number} points at #{entry.anchor}, heading anchor is #{question.slug}",
                    entry.line,
                )
            if entry.title != question.title:
                yield _warning(
                    "toc",
                    level.path,
                    f"entry {entry.number} title '{entry.title}' differs from heading '{question.title}'",
                    entry.line,
                )


@rule("fences")
def check_fences(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    for document in corpus.documents():
        for fence in document.fences:
            if not fence.closed:
                yield _error("fences", document.path, "code block is never closed", fence.open_line)
            elif not fence.language:
                yield _warning("fences", document.path, "code block has no language label", fence.open_line)
            elif fence.language not in settings.allowed_languages:
                yield _warning(
                    "fences",
                    document.path,
                    f"unexpected code block language '{fence.language}'",
                    fence.open_line,
                )


@rule("links")
def check_links(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    for document in corpus.documents():
        for link in document.links:
            if not link.is_relative:
                continue
            target_path, fragment = split_target(link.target)
            if not target_path:
                if fragment and fragment.lower() not in document.slugs():
                    yield _error("links", document.path, f"anchor #{fragment} not found in this file", link.line)
                continue

            resolved = corpus.root / resolve_target(document.path, target_path)
            if not resolved.exists():
                yield _error("links", document.path, f"link target '{link.target}' does not exist", link.line)
                continue
            if not fragment:
                continue
            if resolved.is_dir():
                resolved = resolved / LEVEL_FILE
            target_doc = corpus.document_at(resolved)
            if target_doc is not None and fragment.lower() not in target_doc.slugs():
                yield _error(
                    "links",
                    document.path,
                    f"anchor #{fragment} not found in '{target_path}'",
                    link.line,
                )


@rule("index")
def check_index(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    index = corpus.index
    if index is None:
        return
    if not index.rows:
        yield _error("index", index.path, "no level table found (needs 'Level' and 'Questions' columns)")
        return

    known = {level.slug for level in LEVELS}
    rows = {}
    for row in index.rows:
        if row.level not in known:
            yield _error("index", index.path, f"row names unknown level '{row.level}'", row.line)
        elif row.level in rows:
            yield _error("index", index.path, f"level {row.level} has more than one row", row.line)
        else:
            rows[row.level] = row

    for level in LEVELS:
        row = rows.get(level.slug)
        if row is None:
            yield _error("index", index.path, f"no row for level {level.slug}")
            continue
        if not row.target:
            yield _error("index", index.path, f"row for {level.slug} has no link", row.line)
        else:
            target_path, _ = split_target(row.target)
            linked = document_path(resolve_target(index.path, target_path))
            if linked != level.relative_path:
                yield _error(
                    "index",
                    index.path,
                    f"row for {level.slug} links to '{row.target}', expected {level.relative_path}",
                    row.line,
                )

        document = corpus.level(level.slug)
        if document is None:
            continue
        actual = document.question_range
        if row.first is None or row.last is None:
            yield _error("index", index.path, f"row for {level.slug} declares no question range", row.line)
        elif actual is None:
            yield _error(
                "index",
                index.path,
                f"index declares questions {row.first}-{row.last} for {level.slug} but the file has none",
                row.line,
            )
        elif (row.first, row.last) != actual:
            yield _error(
                "index",
                index.path,
                f"index declares questions {row.first}-{row.last} for {level.slug} "
                f"but the file holds {actual[0]}-{actual[1]}",
                row.line,
            )
        if row.experience and document.experience and row.experience != document.experience:
            yield _error(
                "index",
                index.path,
                f"index gives {level.slug} experience '{row.experience}', the file says '{document.experience}'",
                row.line,
            )
        if document.declared_range and actual and document.declared_range != actual:
            first, last = document.declared_range
            yield _error(
                "index",
                document.path,
                f"file declares questions {first}-{last} but holds {actual[0]}-{actual[1]}",
            )


@rule("navigation")
def check_navigation(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    for document in corpus.levels:
        targets = {
            document_path(resolve_target(document.path, split_target(link.target)[0]))
            for link in document.document.links
            if link.is_relative and split_target(link.target)[0]
        }
        if INDEX_FILE not in targets:
            yield _error("navigation", document.path, "no link back to the index")
        previous, following = neighbours(document.level)
        if previous is not None and previous.relative_path not in targets:
            yield _error("navigation", document.path, f"no link to the previous level ({previous.relative_path})")
        if following is not None and following.relative_path not in targets:
            yield _error("navigation", document.path, f"no link to the next level ({following.relative_path})")


@rule("template")
def check_template(corpus: Corpus, settings: Settings) -> Iterator[Issue]:
    for document in corpus.levels:
        for question in document.questions:
            if not question.theory:
                yield _warning(
                    "template",
                    document.path,
                    f"question {question.number} has no theory text before its first code block or sub-heading",
                    question.line,
                )
