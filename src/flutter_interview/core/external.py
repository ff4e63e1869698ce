import asyncio
import logging
from collections import defaultdict

from flutter_interview.core.corpus import Corpus
from flutter_interview.core.ports.probe import LinkProbe
from flutter_interview.core.rules import EXTERNAL_RULE
from flutter_interview.models import Issue

logger = logging.getLogger(__name__)


def collect_external_links(corpus: Corpus) -> dict[str, list[tuple[str, int]]]:
    """Map each distinct external URL to the (path, line) places it appears."""
    occurrences: dict[str, list[tuple[str, int]]] = defaultdict(list)
    for document in corpus.documents():
        for link in document.links:
            if link.is_external:
                occurrences[link.target].append((document.path, link.line))
    return dict(occurrences)


async def run_external_checks(corpus: Corpus, probe: LinkProbe, concurrency: int = 8) -> list[Issue]:
    occurrences = collect_external_links(corpus)
    semaphore = asyncio.Semaphore(concurrency)

    async def _probe(url: str) -> tuple[str, int | str]:
        async with semaphore:
            return url, await probe.check(url)

    logger.info("Probing %d external URL(s)", len(occurrences))
    results = await asyncio.gather(*(_probe(url) for url in occurrences))

    issues: list[Issue] = []
    for url, result in results:
        if isinstance(result, int) and result < 400:
            continue
        detail = f"status {result}" if isinstance(result, int) else result
        for path, line in occurrences[url]:
            issues.append(
                Issue(
                    rule=EXTERNAL_RULE,
                    severity="warning",
                    path=path,
                    line=line,
                    message=f"external link {url} failed: {detail}",
                )
            )
    return issues
