"""Table-of-contents rendering for level documents."""

from flutter_interview.core.corpus import TOC_HEADING
from flutter_interview.core.markdown import parse_markdown
from flutter_interview.models import LevelDocument


def render_toc(level: LevelDocument) -> str:
    """Build the TOC list from the level's ``##`` sections and ``###`` questions."""
    lines: list[str] = []
    current: str | None = None
    for question in level.questions:
        entry = f"[{question.number}. {question.title}](#{question.slug})"
        if question.section is None:
            lines.append(f"- {entry}")
            continue
        if question.section != current:
            current = question.section
            lines.append(f"- **{current}**")
        lines.append(f"  - {entry}")
    return "\n".join(lines)


def replace_toc(text: str, toc: str) -> str:
    """Swap the body of the ``## Table of Contents`` section for *toc*.

    When the section is missing it is inserted before the first ``##`` heading,
    or appended if the document has none.
    """
    document = parse_markdown(text)
    lines = list(document.lines)
    block = ["", *toc.splitlines(), ""]

    headings = document.headings
    for i, heading in enumerate(headings):
        if heading.depth <= 2 and heading.text.strip().lower() == TOC_HEADING:
            end = next((h.line - 1 for h in headings[i + 1 :] if h.depth <= 2), len(lines))
            lines[heading.line : end] = block
            break
    else:
        first_section = next((h for h in headings if h.depth == 2), None)
        section = ["## Table of Contents", *block]
        if first_section is None:
            lines.extend(["", *section])
        else:
            at = first_section.line - 1
            lines[at:at] = section

    result = "\n".join(lines)
    return result + "\n" if text.endswith("\n") or not text else result
