"""Markdown parsing on the tree-sitter ``markdown`` and ``markdown_inline`` grammars.

The block grammar yields headings, fenced code blocks, pipe tables, link
reference definitions and the inline ranges. Each inline range is parsed again
with the inline grammar for links, images, autolinks and code spans.
"""

import re
from collections import Counter
from collections.abc import Iterator
from functools import cache
from typing import cast

from tree_sitter import Node, Parser
from tree_sitter_language_pack import SupportedLanguage, get_parser

from flutter_interview.models import CodeFence, Heading, Link, MarkdownDocument, Table

BLOCK_GRAMMAR = "markdown"
INLINE_GRAMMAR = "markdown_inline"

_CLOSING_HASHES_RE = re.compile(r"\s+#+\s*$")
_SLUG_STRIP_RE = re.compile(r"[^\w\- ]")

_LINK_NODES = frozenset({"inline_link", "image"})
_REFERENCE_LINK_NODES = frozenset({"full_reference_link", "collapsed_reference_link", "shortcut_link"})
_LABEL_NODES = frozenset({"link_text", "image_description"})
_BRACKET_TOKENS = frozenset({"!", "[", "]", "!["})
_HIDDEN_DELIMITERS = frozenset({"emphasis_delimiter", "code_span_delimiter"})


@cache
def _parser(grammar: str) -> Parser:
    return get_parser(cast(SupportedLanguage, grammar))


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _child(node: Node, node_type: str) -> Node | None:
    return next((c for c in node.children if c.type == node_type), None)


def _label(node: Node) -> Node | None:
    label = _child(node, "link_text")
    return label if label is not None else _child(node, "image_description")


def _walk(node: Node) -> Iterator[Node]:
    yield node
    for child in node.children:
        yield from _walk(child)


def _label_range(node: Node) -> tuple[int, int]:
    """Byte range of a link label without its brackets."""
    start, end = node.start_byte, node.end_byte
    for child in node.children:
        if child.is_named or child.type not in _BRACKET_TOKENS:
            break
        start = child.end_byte
    for child in reversed(node.children):
        if child.is_named or child.type not in _BRACKET_TOKENS:
            break
        end = child.start_byte
    return start, max(start, end)


def _display(node: Node, source: bytes) -> str:
    """What a renderer shows for an inline node: link labels, code content, no emphasis markers."""
    if node.type in _LINK_NODES or node.type in _REFERENCE_LINK_NODES:
        label = _label(node)
        return _display(label, source) if label is not None else ""
    if node.type == "backslash_escape":
        return _text(node, source)[1:]
    if node.type in _HIDDEN_DELIMITERS:
        return ""

    start, end = _label_range(node) if node.type in _LABEL_NODES else (node.start_byte, node.end_byte)
    parts: list[str] = []
    cursor = start
    for child in node.children:
        if child.start_byte < start or child.end_byte > end:
            continue
        parts.append(source[cursor : child.start_byte].decode("utf-8"))
        parts.append(_display(child, source))
        cursor = child.end_byte
    parts.append(source[cursor:end].decode("utf-8"))
    return "".join(parts)


def strip_inline_markup(text: str) -> str:
    """Reduce inline Markdown to what a renderer displays."""
    source = text.encode("utf-8")
    return _display(_parser(INLINE_GRAMMAR).parse(source).root_node, source)


def slugify(text: str) -> str:
    """GitHub-style anchor for a heading."""
    slug = strip_inline_markup(text).strip().lower()
    slug = _SLUG_STRIP_RE.sub("", slug)
    return slug.replace(" ", "-")


def _destination(node: Node, source: bytes) -> str:
    target = _text(node, source).strip()
    if target.startswith("<") and target.endswith(">"):
        target = target[1:-1]
    return target


def _inline_links(source: bytes, first_line: int) -> list[Link]:
    """Links and images in one inline range; *first_line* is the range's 1-based line."""
    links: list[Link] = []
    for node in _walk(_parser(INLINE_GRAMMAR).parse(source).root_node):
        line = first_line + node.start_point[0]
        if node.type in _LINK_NODES:
            destination = _child(node, "link_destination")
            if destination is None:
                continue
            label = _label(node)
            text = ""
            if label is not None:
                start, end = _label_range(label)
                text = source[start:end].decode("utf-8")
            links.append(
                Link(
                    text=text,
                    target=_destination(destination, source),
                    line=line,
                    is_image=node.type == "image",
                )
            )
        elif node.type == "uri_autolink":
            target = _text(node, source).strip("<>")
            links.append(Link(text=target, target=target, line=line))
    return links


def extract_links(text: str, line_no: int) -> list[Link]:
    """Links in a snippet of inline Markdown starting at *line_no*."""
    return _inline_links(text.encode("utf-8"), line_no)


def _heading(node: Node, source: bytes) -> tuple[int, str] | None:
    if node.type == "atx_heading":
        marker = next((c for c in node.children if c.type.startswith("atx_h") and c.type.endswith("_marker")), None)
        content = _child(node, "inline")
        if marker is None or content is None:
            return None
        return int(marker.type[len("atx_h")]), _CLOSING_HASHES_RE.sub("", _text(content, source).strip())
    # setext_heading
    paragraph = _child(node, "paragraph")
    content = _child(paragraph, "inline") if paragraph is not None else None
    if content is None:
        return None
    depth = 1 if _child(node, "setext_h1_underline") is not None else 2
    return depth, " ".join(_text(content, source).split())


def _fence(node: Node, source: bytes) -> CodeFence:
    delimiters = [c for c in node.children if c.type == "fenced_code_block_delimiter"]
    info = _child(node, "info_string")
    words = _text(info, source).split() if info is not None else []
    return CodeFence(
        language=words[0].lower() if words else "",
        open_line=(delimiters[0] if delimiters else node).start_point[0] + 1,
        close_line=delimiters[1].start_point[0] + 1 if len(delimiters) > 1 else None,
    )


def _row_cells(row: Node, source: bytes) -> list[str]:
    """Cell texts of a table row, keeping empty cells between adjacent pipes."""
    if not any(c.type == "|" for c in row.children):
        return [_text(c, source).strip() for c in row.children if c.type == "pipe_table_cell"]
    cells: list[str] = []
    current: str | None = None
    for child in row.children:
        if child.type == "|":
            if current is not None:
                cells.append(current)
            current = ""
        elif child.type == "pipe_table_cell":
            current = _text(child, source).strip()
    if current:
        cells.append(current)
    return cells


def _table(node: Node, source: bytes) -> Table:
    header = _child(node, "pipe_table_header")
    rows = [c for c in node.children if c.type == "pipe_table_row"]
    return Table(
        headers=_row_cells(header, source) if header is not None else [],
        rows=[_row_cells(row, source) for row in rows],
        line=node.start_point[0] + 1,
        row_lines=[row.start_point[0] + 1 for row in rows],
    )


def _reference_definition(node: Node, source: bytes) -> Link | None:
    destination = _child(node, "link_destination")
    if destination is None:
        return None
    label = _child(node, "link_label")
    text = _text(label, source).strip() if label is not None else ""
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    return Link(text=text, target=_destination(destination, source), line=node.start_point[0] + 1)


def _has_inline(node: Node) -> bool:
    return any(c.type == "inline" for c in node.children)


def parse_markdown(text: str, path: str = "<string>") -> MarkdownDocument:
    source = text.encode("utf-8")
    tree = _parser(BLOCK_GRAMMAR).parse(source)
    headings: list[Heading] = []
    fences: list[CodeFence] = []
    links: list[Link] = []
    tables: list[Table] = []
    slug_counts: Counter[str] = Counter()

    for node in _walk(tree.root_node):
        if node.type in {"atx_heading", "setext_heading"}:
            parsed = _heading(node, source)
            if parsed is None:
                continue
            depth, heading_text = parsed
            base = slugify(heading_text)
            seen = slug_counts[base]
            slug_counts[base] += 1
            headings.append(
                Heading(
                    depth=depth,
                    text=heading_text,
                    line=node.start_point[0] + 1,
                    slug=base if seen == 0 else f"{base}-{seen}",
                )
            )
        elif node.type == "fenced_code_block":
            fences.append(_fence(node, source))
        elif node.type == "pipe_table":
            tables.append(_table(node, source))
        elif node.type == "link_reference_definition":
            definition = _reference_definition(node, source)
            if definition is not None:
                links.append(definition)
        elif node.type == "inline" or (node.type == "pipe_table_cell" and not _has_inline(node)):
            links.extend(_inline_links(source[node.start_byte : node.end_byte], node.start_point[0] + 1))

    return MarkdownDocument(
        path=path,
        lines=text.splitlines(),
        headings=headings,
        fences=fences,
        links=links,
        tables=tables,
    )
