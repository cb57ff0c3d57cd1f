'''Article and batch records passed through the pipeline and held by the cache.'''

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Source:
    '''A feed endpoint. The list of sources is fixed at startup.'''

    name: str
    url: str


@dataclass(frozen=True)
class Article:
    '''
    One headline. Dedup identity is the lowercased title.

    published_at is the raw date string from the feed, not parsed.
    '''

    title: str
    source: str
    url: str
    published_at: str = ''
    summary: str = ''

    @property
    def title_key(self) -> str:
        return self.title.lower()

    def to_dict(self) -> dict[str, str]:
        return {
            'title': self.title,
            'source': self.source,
            'url': self.url,
            'publishedAt': self.published_at,
            'summary': self.summary,
        }


@dataclass(frozen=True)
class NewsBatch:
    '''
    Result of one successful generation run. Never mutated; a refresh builds a new one.
    '''

    generated_at: datetime
    ttl_seconds: int
    articles: tuple[Article, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, now: datetime, ttl_seconds: int) -> NewsBatch:
        return cls(generated_at=now, ttl_seconds=ttl_seconds, articles=())

    def age_seconds(self, now: datetime) -> float:
        return (now - self.generated_at).total_seconds()

    def is_fresh(self, now: datetime) -> bool:
        return self.age_seconds(now) < self.ttl_seconds

    def to_dict(self) -> dict:
        '''Published API shape: generatedAt (ISO-8601), ttlSeconds, articles.'''
        return {
            'generatedAt': self.generated_at.isoformat(),
            'ttlSeconds': int(self.ttl_seconds),
            'articles': [a.to_dict() for a in self.articles],
        }
