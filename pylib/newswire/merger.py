'''Cross-source dedup and round-robin interleave of fetched articles.'''

from collections import deque
from collections.abc import Iterable

from newswire.config import FINAL_ARTICLE_COUNT
from newswire.models import Article


def dedupe_by_title(articles: Iterable[Article]) -> list[Article]:
    '''
    Keep the first article seen for each lowercased title, in original order.
    '''
    seen: dict[str, Article] = {}
    for article in articles:
        seen.setdefault(article.title_key, article)
    return list(seen.values())


def interleave_by_source(articles: Iterable[Article]) -> list[Article]:
    '''
    Round-robin articles across sources so no single source crowds the front.

    Sources are swept in order of first appearance; each sweep takes the next
    article from every source that still has one.
    '''
    queues: dict[str, deque[Article]] = {}
    for article in articles:
        queues.setdefault(article.source, deque()).append(article)

    out: list[Article] = []
    pending = list(queues.values())
    while pending:
        for queue in pending:
            out.append(queue.popleft())
        pending = [q for q in pending if q]
    return out


def merge_articles(articles: Iterable[Article], limit: int = FINAL_ARTICLE_COUNT) -> list[Article]:
    '''Dedupe, interleave by source, then keep the first `limit`.'''
    return interleave_by_source(dedupe_by_title(articles))[:limit]
