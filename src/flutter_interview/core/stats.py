from collections import Counter

from pydantic import BaseModel

from flutter_interview.core.corpus import Corpus


class LevelStats(BaseModel):
    level: str
    path: str
    questions: int
    first: int | None
    last: int | None
    sections: list[str]
    code_blocks: int
    with_common_mistakes: int
    with_follow_up: int


class CorpusStats(BaseModel):
    levels: list[LevelStats]
    total_questions: int
    code_languages: dict[str, int]
    relative_links: int
    external_links: int
    images: int


def collect_stats(corpus: Corpus) -> CorpusStats:
    levels: list[LevelStats] = []
    languages: Counter[str] = Counter()

    for document in corpus.levels:
        question_range = document.question_range
        languages.update(fence.language or "(none)" for fence in document.document.fences)
        levels.append(
            LevelStats(
                level=document.level,
                path=document.path,
                questions=len(document.questions),
                first=question_range[0] if question_range else None,
                last=question_range[1] if question_range else None,
                sections=document.sections,
                code_blocks=len(document.document.fences),
                with_common_mistakes=sum(1 for q in document.questions if q.has_common_mistakes),
                with_follow_up=sum(1 for q in document.questions if q.has_follow_up),
            )
        )

    links = [link for doc in corpus.documents() for link in doc.links]
    return CorpusStats(
        levels=levels,
        total_questions=sum(s.questions for s in levels),
        code_languages=dict(languages.most_common()),
        relative_links=sum(1 for link in links if link.is_relative and not link.is_image),
        external_links=sum(1 for link in links if link.is_external and not link.is_image),
        images=sum(1 for link in links if link.is_image),
    )
