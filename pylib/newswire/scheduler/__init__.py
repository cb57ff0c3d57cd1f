'''Background cache refreshers. Pick one with get_refresher().'''

from newswire.cache import NewsCache
from newswire.scheduler.asyncio_loop import AsyncioRefresher
from newswire.scheduler.base import BatchCallback, CacheRefresher

__all__ = ['AsyncioRefresher', 'BatchCallback', 'CacheRefresher', 'get_refresher']


def get_refresher(
    kind: str,
    cache: NewsCache,
    interval_seconds: float = 900,
    on_batch: BatchCallback | None = None,
) -> CacheRefresher:
    '''
    Factory for refreshers. kind: asyncio (default) or apscheduler.
    '''
    if kind == 'asyncio':
        return AsyncioRefresher(cache, interval_seconds=interval_seconds, on_batch=on_batch)
    if kind == 'apscheduler':
        from newswire.scheduler.apscheduler_impl import APSchedulerRefresher
        return APSchedulerRefresher(cache, interval_seconds=interval_seconds, on_batch=on_batch)
    raise ValueError(f'unknown scheduler: {kind}')
