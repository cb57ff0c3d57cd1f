'''
Time-bounded news cache with stale-serve and single-flight refresh.

One NewsCache is built at process start and handed to whatever serves
requests. It holds at most one NewsBatch and swaps it whole on refresh.
'''

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from newswire.config import CACHE_TTL_SECONDS
from newswire.models import Clock, NewsBatch, utcnow


logger = structlog.get_logger()


class NewsCache:
    '''
    Serve the held batch while fresh; otherwise regenerate once and share the result.

    generate: zero-argument coroutine function producing a new NewsBatch. Any
      exception it raises is caught here and never reaches callers.
    ttl_seconds: TTL for the synthetic empty batch served before anything was
      ever generated. Held batches carry their own TTL.
    clock: returns the current aware datetime; injectable for tests.
    '''

    def __init__(
        self,
        generate: Callable[[], Awaitable[NewsBatch]],
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._generate = generate
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._batch: NewsBatch | None = None
        self._inflight: asyncio.Task[NewsBatch] | None = None

    @property
    def batch(self) -> NewsBatch | None:
        '''The currently held batch, or None if nothing was generated yet.'''
        return self._batch

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None

    async def get_current(self) -> NewsBatch:
        '''
        Return the held batch if fresh. Otherwise join (or start) a refresh and
        return its result: the new batch, the previous batch if the refresh
        failed, or an empty batch if there was never one.
        '''
        batch = self._batch
        if batch is not None and batch.is_fresh(self._clock()):
            return batch
        return await self.refresh()

    async def refresh(self) -> NewsBatch:
        '''
        Regenerate regardless of freshness (the scheduled path), joining any
        refresh already in flight.
        '''
        # No await between the check and the assignment, so on one event loop
        # only the first caller creates the task.
        if self._inflight is None:
            self._inflight = asyncio.create_task(self._run_refresh())
        # Shielded: a cancelled caller must not cancel the refresh others await.
        return await asyncio.shield(self._inflight)

    async def _run_refresh(self) -> NewsBatch:
        try:
            try:
                batch = await self._generate()
            except Exception:
                logger.exception('news generation failed', has_previous=self._batch is not None)
                return self._fallback()
            if not isinstance(batch, NewsBatch):
                logger.error('news generation returned no batch', got=type(batch).__name__)
                return self._fallback()
            self._batch = batch
            logger.info('news cache refreshed', articles=len(batch.articles), generated_at=batch.generated_at.isoformat())
            return batch
        finally:
            self._inflight = None

    def _fallback(self) -> NewsBatch:
        if self._batch is not None:
            return self._batch
        return NewsBatch.empty(self._clock(), self._ttl_seconds)
