'''Concurrent fetch of every configured source.'''

import asyncio
from collections.abc import Iterable

import structlog

from newswire.fetchers.protocol import FeedFetcher, FetchResult
from newswire.models import Source


logger = structlog.get_logger()


async def _fetch_one(fetcher: FeedFetcher, source: Source) -> FetchResult:
    try:
        result = await fetcher.fetch(source)
    except Exception as e:
        # Fetchers are supposed to report failures, but a custom one might raise
        result = FetchResult(source=source, success=False, error=f'{type(e).__name__}: {e}')
    if result.success:
        logger.debug('fetched feed', source=source.name, status=result.status, size=len(result.text))
    else:
        logger.warning('feed fetch failed', source=source.name, url=source.url, error=result.error)
    return result


async def fetch_all(sources: Iterable[Source], fetcher: FeedFetcher) -> list[FetchResult]:
    '''
    Fetch all sources concurrently. Results come back in source order.

    Every fetch settles on its own; one source failing or timing out never
    cancels or delays the others.
    '''
    return list(await asyncio.gather(*[_fetch_one(fetcher, s) for s in sources]))
