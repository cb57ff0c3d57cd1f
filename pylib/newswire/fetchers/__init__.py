'''Feed fetchers: pluggable fetcher protocol plus concurrent multi-source fetch.'''

from newswire.fetchers.batch import fetch_all
from newswire.fetchers.protocol import (
    FeedFetcher,
    FetchResult,
    HttpFeedFetcher,
    create_fetcher,
)

__all__ = [
    'FeedFetcher',
    'FetchResult',
    'HttpFeedFetcher',
    'create_fetcher',
    'fetch_all',
]
