'''Keeps a NewsCache warm on a fixed interval. Implementations: asyncio loop, APScheduler.'''

from abc import ABC, abstractmethod
from collections.abc import Callable

import structlog

from newswire.cache import NewsCache
from newswire.models import NewsBatch


logger = structlog.get_logger()

BatchCallback = Callable[[NewsBatch], None]


class CacheRefresher(ABC):
    '''
    Forces a cache refresh every `interval_seconds` until stopped.

    Subclasses supply the timing (start/stop); each firing goes through tick(),
    which refreshes the cache, records the outcome and hands the batch now being
    served to `on_batch`, if given.
    '''

    def __init__(self, cache: NewsCache, interval_seconds: float = 900, on_batch: BatchCallback | None = None) -> None:
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.on_batch = on_batch
        self.ticks = 0
        self.last_batch: NewsBatch | None = None

    async def tick(self) -> NewsBatch:
        '''One refresh. Never leaves the cache empty-handed; see NewsCache.refresh.'''
        previous = self.cache.batch
        batch = await self.cache.refresh()
        self.ticks += 1
        self.last_batch = batch
        if previous is not None and batch is previous:
            logger.warning('refresh failed, still serving previous batch', generated_at=batch.generated_at.isoformat())
        elif not batch.articles:
            logger.warning('refresh produced no articles')
        else:
            logger.info(
                'refresh tick',
                articles=len(batch.articles),
                sources=len({a.source for a in batch.articles}),
                generated_at=batch.generated_at.isoformat(),
            )
        if self.on_batch:
            self.on_batch(batch)
        return batch

    @abstractmethod
    async def start(self) -> None:
        '''Start refreshing; the first tick fires right away.'''

    @abstractmethod
    async def stop(self) -> None:
        '''Stop refreshing; an in-progress tick is cancelled.'''
