'''
Generation run: fetch every source, parse, merge, summarize, wrap in a NewsBatch.
This is the routine NewsCache calls on a miss or stale read, and the one the
scheduler calls on each tick.
'''

from collections.abc import Awaitable, Callable

import structlog

from newswire.config import Settings
from newswire.errors import GenerationError
from newswire.fetchers import FeedFetcher, fetch_all
from newswire.llm import CompletionOptions
from newswire.merger import merge_articles
from newswire.models import Article, Clock, NewsBatch, utcnow
from newswire.parser import parse_feed
from newswire.summarizer import Completer, summarize_articles


async def collect_articles(settings: Settings, fetcher: FeedFetcher) -> list[Article]:
    '''Fetch and parse all sources, concatenated in source order.'''
    results = await fetch_all(settings.sources, fetcher)
    articles: list[Article] = []
    for result in results:
        if not result.success:
            continue
        articles.extend(parse_feed(result.text, result.source.name, limit=settings.max_articles_per_source))
    return articles[: settings.max_articles_per_source * len(settings.sources)]


async def generate_news(
    settings: Settings,
    fetcher: FeedFetcher,
    complete: Completer,
    clock: Clock = utcnow,
) -> NewsBatch:
    '''
    Run the whole pipeline once.

    Raises GenerationError when no source yielded a single article, so callers
    holding an older batch can keep serving it.
    '''
    log = structlog.get_logger()
    articles = await collect_articles(settings, fetcher)
    if not articles:
        raise GenerationError(f'No articles from any of {len(settings.sources)} sources')

    merged = merge_articles(articles, limit=settings.final_article_count)
    options = CompletionOptions(
        max_output_tokens=settings.summary_max_tokens,
        temperature=settings.summary_temperature,
    )
    summarized = await summarize_articles(merged, complete, options)
    log.info('generated news batch', fetched=len(articles), articles=len(summarized))
    return NewsBatch(
        generated_at=clock(),
        ttl_seconds=settings.cache_ttl_seconds,
        articles=tuple(summarized),
    )


def make_generator(
    settings: Settings,
    fetcher: FeedFetcher,
    complete: Completer,
    clock: Clock = utcnow,
) -> Callable[[], Awaitable[NewsBatch]]:
    '''Bind dependencies into the zero-argument routine NewsCache expects.'''

    async def _generate() -> NewsBatch:
        return await generate_news(settings, fetcher, complete, clock=clock)

    return _generate
