"""Loading the document set into level and index models."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from flutter_interview.core.levels import INDEX_FILE, LEVELS, normalize_level
from flutter_interview.core.markdown import extract_links, parse_markdown, strip_inline_markup
from flutter_interview.models import (
    IndexDocument,
    IndexRow,
    LevelDocument,
    MarkdownDocument,
    Question,
    TocEntry,
)

logger = logging.getLogger(__name__)

TOC_HEADING = "table of contents"

QUESTION_HEADING_RE = re.compile(r"^(\d+)\.\s+(.+)$")
EXPERIENCE_RE = re.compile(r"\*\*Experience:\*\*\s*(.+?)\s*$")
DECLARED_RANGE_RE = re.compile(r"\*\*Questions:\*\*\s*(\d+)\s*[-–]\s*(\d+)")
RANGE_CELL_RE = re.compile(r"(\d+)\s*(?:[-–]\s*(\d+))?")


def fenced_lines(document: MarkdownDocument) -> set[int]:
    """Line numbers covered by fenced blocks, fence markers included."""
    covered: set[int] = set()
    for fence in document.fences:
        end = fence.close_line if fence.close_line is not None else len(document.lines)
        covered.update(range(fence.open_line, end + 1))
    return covered


def _section_end(document: MarkdownDocument, heading_index: int, max_depth: int) -> int:
    """Last line belonging to the heading at *heading_index*."""
    for later in document.headings[heading_index + 1 :]:
        if later.depth <= max_depth:
            return later.line - 1
    return len(document.lines)


def _parse_toc(document: MarkdownDocument) -> list[TocEntry]:
    for i, heading in enumerate(document.headings):
        if heading.depth <= 2 and heading.text.strip().lower() == TOC_HEADING:
            end = _section_end(document, i, 2)
            entries: list[TocEntry] = []
            for link in document.links:
                if not heading.line < link.line <= end or link.is_image or not link.target.startswith("#"):
                    continue
                if match := QUESTION_HEADING_RE.match(link.text.strip()):
                    entries.append(
                        TocEntry(
                            number=int(match.group(1)),
                            title=match.group(2).strip(),
                            anchor=link.target[1:],
                            line=link.line,
                        )
                    )
            return entries
    return []


def _parse_questions(document: MarkdownDocument) -> tuple[list[str], list[Question]]:
    sections: list[str] = []
    questions: list[Question] = []
    section: str | None = None
    covered = fenced_lines(document)

    for i, heading in enumerate(document.headings):
        if heading.depth <= 2:
            is_toc = heading.text.strip().lower() == TOC_HEADING
            section = heading.text.strip() if heading.depth == 2 and not is_toc else None
            continue
        if heading.depth != 3:
            continue
        match = QUESTION_HEADING_RE.match(heading.text)
        if not match:
            continue

        end = _section_end(document, i, 3)
        body_fences = [f for f in document.fences if heading.line < f.open_line <= end]
        sub_headings = [h for h in document.headings[i + 1 :] if h.line <= end]

        theory_end = end
        if body_fences:
            theory_end = min(theory_end, body_fences[0].open_line - 1)
        if sub_headings:
            theory_end = min(theory_end, sub_headings[0].line - 1)
        theory = " ".join(
            document.lines[n - 1].strip()
            for n in range(heading.line + 1, theory_end + 1)
            if n not in covered and document.lines[n - 1].strip()
        )

        # Sections only count once they hold a question; trailers like "Navigation" do not.
        if section is not None and section not in sections:
            sections.append(section)
        sub_titles = [strip_inline_markup(h.text).lower() for h in sub_headings]
        questions.append(
            Question(
                number=int(match.group(1)),
                title=match.group(2).strip(),
                line=heading.line,
                slug=heading.slug,
                section=section,
                theory=theory,
                code_languages=[f.language for f in body_fences],
                has_common_mistakes=any(t.startswith("common mistakes") for t in sub_titles),
                has_follow_up=any("follow-up" in t or "follow up" in t for t in sub_titles),
            )
        )
    return sections, questions


def parse_level_document(text: str, path: str, level: str) -> LevelDocument:
    document = parse_markdown(text, path)
    covered = fenced_lines(document)

    experience: str | None = None
    declared: tuple[int, int] | None = None
    for line_no, line in enumerate(document.lines, start=1):
        if line_no in covered:
            continue
        if experience is None and (m := EXPERIENCE_RE.search(line)):
            experience = m.group(1).strip()
        if declared is None and (m := DECLARED_RANGE_RE.search(line)):
            declared = (int(m.group(1)), int(m.group(2)))

    title = next((h.text for h in document.headings if h.depth == 1), None)
    sections, questions = _parse_questions(document)
    return LevelDocument(
        level=normalize_level(level),
        path=path,
        title=title,
        experience=experience,
        declared_range=declared,
        sections=sections,
        toc=_parse_toc(document),
        questions=questions,
        document=document,
    )


def _row_level(cell: str, line_no: int) -> tuple[str, str]:
    """Return (level, target) for the level cell of an index row."""
    links = [link for link in extract_links(cell, line_no) if not link.is_image]
    target = links[0].target if links else ""
    candidates = []
    if target:
        candidates.append(PurePosixPath(target.lstrip("/").split("#", 1)[0]).parent.name)
    label = strip_inline_markup(cell).strip()
    candidates.append(label)
    for candidate in candidates:
        try:
            return normalize_level(candidate), target
        except ValueError:
            continue
    return label, target


def parse_index_document(text: str, path: str = INDEX_FILE) -> IndexDocument:
    document = parse_markdown(text, path)
    rows: list[IndexRow] = []
    for table in document.tables:
        headers = [strip_inline_markup(h).strip().lower() for h in table.headers]
        if "level" not in headers or "questions" not in headers:
            continue
        for cells, line_no in zip(table.rows, table.row_lines, strict=False):
            values = dict(zip(headers, cells, strict=False))
            level, target = _row_level(values.get("level", ""), line_no)
            first = last = None
            if m := RANGE_CELL_RE.search(values.get("questions", "")):
                first = int(m.group(1))
                last = int(m.group(2)) if m.group(2) else first
            rows.append(
                IndexRow(
                    level=level,
                    target=target,
                    experience=values.get("experience") or None,
                    first=first,
                    last=last,
                    topics=values.get("topics", ""),
                    line=line_no,
                )
            )
        break
    return IndexDocument(path=path, rows=rows, document=document)


@dataclass
class Corpus:
    root: Path
    index: IndexDocument | None
    levels: list[LevelDocument]
    missing: list[str] = field(default_factory=list)
    _extra: dict[str, MarkdownDocument | None] = field(default_factory=dict, repr=False)

    def level(self, slug: str) -> LevelDocument | None:
        slug = normalize_level(slug)
        return next((doc for doc in self.levels if doc.level == slug), None)

    def documents(self) -> list[MarkdownDocument]:
        docs = [self.index.document] if self.index else []
        docs.extend(level.document for level in self.levels)
        return docs

    def relative(self, path: Path) -> str:
        return path.resolve().relative_to(self.root.resolve()).as_posix()

    def document_at(self, path: Path) -> MarkdownDocument | None:
        """Parsed document for *path*, loading Markdown outside the level set on demand."""
        try:
            key = self.relative(path)
        except ValueError:
            key = str(path.resolve())
        for doc in self.documents():
            if doc.path == key:
                return doc
        if key not in self._extra:
            if path.is_file() and path.suffix.lower() in {".md", ".markdown"}:
                self._extra[key] = parse_markdown(path.read_text(encoding="utf-8"), key)
            else:
                self._extra[key] = None
        return self._extra[key]


def load_corpus(root: str | Path) -> Corpus:
    root_path = Path(root)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Corpus root not found: {root}")

    missing: list[str] = []
    index: IndexDocument | None = None
    index_path = root_path / INDEX_FILE
    if index_path.is_file():
        index = parse_index_document(index_path.read_text(encoding="utf-8"), INDEX_FILE)
    else:
        missing.append(INDEX_FILE)

    levels: list[LevelDocument] = []
    for level in LEVELS:
        level_path = root_path / level.relative_path
        if not level_path.is_file():
            missing.append(level.relative_path)
            continue
        levels.append(parse_level_document(level_path.read_text(encoding="utf-8"), level.relative_path, level.slug))

    logger.debug("Loaded corpus at %s: %d level file(s), %d missing", root_path, len(levels), len(missing))
    return Corpus(root=root_path, index=index, levels=levels, missing=missing)
