'''
Feed fetcher protocol for retrieving raw feed documents.

Fetchers never raise: every outcome, good or bad, comes back as a FetchResult.
'''

from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
import structlog

from newswire.models import Source


logger = structlog.get_logger()

DEFAULT_HEADERS = {
    'User-Agent': 'newswire/0.1 (+headline aggregator)',
    'Accept': 'application/rss+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5',
}


@dataclass
class FetchResult:
    '''Result of fetching one source's feed document.'''

    source: Source
    text: str = ''
    status: int | None = None
    success: bool = True
    error: str | None = None


class FeedFetcher(ABC):
    '''Protocol for feed document fetchers.'''

    @abstractmethod
    async def fetch(self, source: Source) -> FetchResult:
        '''
        Fetch a source's feed document.

        Args:
            source: feed endpoint to retrieve

        Returns:
            FetchResult with the raw document text, or success=False and an error
        '''
        pass


class HttpFeedFetcher(FeedFetcher):
    '''
    Plain HTTP fetcher using httpx.

    A non-2xx status or any transport error (including timeout) is reported as a
    failed FetchResult, never raised.
    '''

    def __init__(
        self,
        timeout: float = 10.0,
        follow_redirects: bool = True,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.transport = transport

    async def fetch(self, source: Source) -> FetchResult:
        '''GET the source URL and return its body as text.'''
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
                headers=self.headers,
                transport=self.transport,
            ) as client:
                response = await client.get(source.url)
                if not response.is_success:
                    return FetchResult(
                        source=source,
                        status=response.status_code,
                        success=False,
                        error=f'HTTP {response.status_code}',
                    )
                return FetchResult(source=source, text=response.text, status=response.status_code)

        except Exception as e:
            return FetchResult(
                source=source,
                success=False,
                error=f'{type(e).__name__}: {e}',
            )


def create_fetcher(fetcher_type: str = 'http', **kwargs) -> FeedFetcher:
    '''
    Factory function to create a feed fetcher.

    Args:
        fetcher_type: 'http' (plain httpx GET)
        **kwargs: Additional arguments for the fetcher

    Returns:
        FeedFetcher instance
    '''
    if fetcher_type in ('http', 'simple', 'plain'):
        return HttpFeedFetcher(**kwargs)
    raise ValueError(f'Unknown fetcher type: {fetcher_type}')
