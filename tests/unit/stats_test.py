"""Tests for corpus statistics."""

from pathlib import Path

from flutter_interview.core.corpus import Corpus, load_corpus
from flutter_interview.core.stats import collect_stats


def test_sample_stats(corpus: Corpus) -> None:
    stats = collect_stats(corpus)
    assert stats.total_questions == 8
    assert [level.level for level in stats.levels] == ["junior", "mid-level", "senior", "expert"]
    junior = stats.levels[0]
    assert (junior.first, junior.last, junior.questions) == (1, 2, 2)
    assert junior.sections == ["Basics"]
    assert junior.code_blocks == 2
    assert junior.with_common_mistakes == 2
    assert junior.with_follow_up == 0
    assert stats.code_languages == {"dart": 8}
    assert stats.external_links == 0
    assert stats.images == 0
    # Index rows, TOC anchors and two navigation lines per level.
    assert stats.relative_links == 4 + (2 + 4) + (2 + 6) + (2 + 6) + (2 + 4)


def test_languages_and_links(corpus_root: Path) -> None:
    path = corpus_root / "senior" / "README.md"
    path.write_text(
        path.read_text(encoding="utf-8")
        + "\n```kotlin\nfun main() {}\n```\n\n```\nplain\n```\n\n"
        + "[![Kotlin](https://img.shields.io/badge/Kotlin-2-purple)](https://kotlinlang.org)\n",
        encoding="utf-8",
    )
    stats = collect_stats(load_corpus(corpus_root))
    assert stats.code_languages == {"dart": 8, "kotlin": 1, "(none)": 1}
    assert stats.external_links == 1
    assert stats.images == 1
    senior = next(level for level in stats.levels if level.level == "senior")
    assert senior.code_blocks == 4


def test_missing_level_is_left_out(corpus_root: Path) -> None:
    (corpus_root / "expert" / "README.md").unlink()
    stats = collect_stats(load_corpus(corpus_root))
    assert stats.total_questions == 6
    assert "expert" not in [level.level for level in stats.levels]
