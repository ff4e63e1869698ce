"""Tests for table-of-contents rendering and replacement."""

from pathlib import Path

from flutter_interview.core.corpus import Corpus, parse_level_document
from flutter_interview.core.toc import render_toc, replace_toc


def test_render_matches_sample(corpus: Corpus) -> None:
    junior = corpus.level("junior")
    assert junior is not None
    assert render_toc(junior) == (
        "- **Basics**\n"
        "  - [1. What is a widget?](#1-what-is-a-widget)\n"
        "  - [2. What is `BuildContext`?](#2-what-is-buildcontext)"
    )


def test_render_groups_by_section() -> None:
    text = "## Dart\n\n### 1. Null safety\n\nT.\n\n## Flutter\n\n### 2. Widgets\n\nT.\n\n### 3. Keys\n\nT.\n"
    rendered = render_toc(parse_level_document(text, "junior/README.md", "junior"))
    assert rendered.splitlines() == [
        "- **Dart**",
        "  - [1. Null safety](#1-null-safety)",
        "- **Flutter**",
        "  - [2. Widgets](#2-widgets)",
        "  - [3. Keys](#3-keys)",
    ]


def test_render_without_sections() -> None:
    text = "# Title\n\n### 1. Only question\n\nT.\n"
    level = parse_level_document(text, "junior/README.md", "junior")
    assert render_toc(level) == "- [1. Only question](#1-only-question)"


class TestReplaceToc:
    def test_is_idempotent_on_sample(self, corpus: Corpus, corpus_root: Path) -> None:
        junior = corpus.level("junior")
        assert junior is not None
        text = (corpus_root / "junior" / "README.md").read_text(encoding="utf-8")
        assert replace_toc(text, render_toc(junior)) == text

    def test_replaces_stale_entries(self) -> None:
        text = "# T\n\n## Table of Contents\n\n- [1. Old](#1-old)\n- [9. Gone](#9-gone)\n\n## Basics\n\n### 1. New\n"
        result = replace_toc(text, "- [1. New](#1-new)")
        assert result == "# T\n\n## Table of Contents\n\n- [1. New](#1-new)\n\n## Basics\n\n### 1. New\n"

    def test_inserts_before_first_section(self) -> None:
        text = "# T\n\nIntro.\n\n## Basics\n\n### 1. New\n"
        result = replace_toc(text, "- [1. New](#1-new)")
        assert result == "# T\n\nIntro.\n\n## Table of Contents\n\n- [1. New](#1-new)\n\n## Basics\n\n### 1. New\n"

    def test_appends_when_no_sections(self) -> None:
        text = "# T\n\n### 1. New\n"
        result = replace_toc(text, "- [1. New](#1-new)")
        assert result.index("## Table of Contents") > result.index("### 1. New")
        assert result.endswith("- [1. New](#1-new)\n\n")

    def test_preserves_missing_trailing_newline(self) -> None:
        text = "## Table of Contents\n\n- stale\n\n## Basics"
        assert replace_toc(text, "- fresh") == "## Table of Contents\n\n- fresh\n\n## Basics"

    def test_toc_heading_inside_fence_is_ignored(self) -> None:
        text = "```text\n## Table of Contents\n```\n\n## Basics\n"
        result = replace_toc(text, "- fresh")
        assert result.count("## Table of Contents") == 2
        assert result.index("- fresh") > result.index("```\n")
