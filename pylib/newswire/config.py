'''
Startup configuration: feed sources, batch sizes, cache TTL.

Everything here is read once when the process starts and is not re-read.
'''

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from newswire.errors import ConfigError
from newswire.models import Source

MAX_ARTICLES_PER_SOURCE = 6
FINAL_ARTICLE_COUNT = 15
CACHE_TTL_SECONDS = 15 * 60
FETCH_TIMEOUT_SECONDS = 10.0
SUMMARY_MAX_TOKENS = 800
SUMMARY_TEMPERATURE = 0.4

DEFAULT_SOURCES: tuple[Source, ...] = (
    Source('BBC World', 'https://feeds.bbci.co.uk/news/world/rss.xml'),
    Source('Reuters World', 'https://feeds.reuters.com/Reuters/worldNews'),
    Source('AP Top Stories', 'https://rss.apnews.com/apf-topnews'),
    Source('CNN Top Stories', 'http://rss.cnn.com/rss/edition.rss'),
    Source('The Guardian World', 'https://www.theguardian.com/world/rss'),
    Source('Al Jazeera Top Stories', 'https://www.aljazeera.com/xml/rss/all.xml'),
    Source('NPR World', 'https://feeds.npr.org/1004/rss.xml'),
)


def load_sources(path: Path) -> tuple[Source, ...]:
    '''
    Read sources from a text file, one per line: Name|URL

    Blank lines and lines starting with # are ignored.
    '''
    try:
        lines = path.read_text(encoding='utf-8').splitlines()
    except OSError as e:
        raise ConfigError(f'Cannot read sources file {path}: {e}') from e
    sources: list[Source] = []
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        parts = [p.strip() for p in line.split('|')]
        if len(parts) != 2 or not parts[0] or not parts[1].startswith('http'):
            raise ConfigError(f'{path}:{lineno}: expected "Name|URL", got {line!r}')
        sources.append(Source(name=parts[0], url=parts[1]))
    if not sources:
        raise ConfigError(f'No sources listed in {path}')
    return tuple(sources)


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f'{name} must be an integer, got {raw!r}') from e
    if value < minimum:
        raise ConfigError(f'{name} must be >= {minimum}, got {value}')
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f'{name} must be a number, got {raw!r}') from e


@dataclass(frozen=True)
class Settings:
    '''Pipeline and cache settings.'''

    sources: tuple[Source, ...] = field(default=DEFAULT_SOURCES)
    max_articles_per_source: int = MAX_ARTICLES_PER_SOURCE
    final_article_count: int = FINAL_ARTICLE_COUNT
    cache_ttl_seconds: int = CACHE_TTL_SECONDS
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    summary_max_tokens: int = SUMMARY_MAX_TOKENS
    summary_temperature: float = SUMMARY_TEMPERATURE

    @classmethod
    def from_env(cls) -> Settings:
        '''Build settings from NEWSWIRE_* env vars, falling back to the defaults.'''
        sources_file = os.environ.get('NEWSWIRE_SOURCES_FILE', '').strip()
        sources = load_sources(Path(sources_file)) if sources_file else DEFAULT_SOURCES
        return cls(
            sources=sources,
            max_articles_per_source=_env_int('NEWSWIRE_MAX_ARTICLES_PER_SOURCE', MAX_ARTICLES_PER_SOURCE),
            final_article_count=_env_int('NEWSWIRE_FINAL_ARTICLE_COUNT', FINAL_ARTICLE_COUNT),
            cache_ttl_seconds=_env_int('NEWSWIRE_CACHE_TTL_SECONDS', CACHE_TTL_SECONDS),
            fetch_timeout=_env_float('NEWSWIRE_FETCH_TIMEOUT', FETCH_TIMEOUT_SECONDS),
            summary_max_tokens=_env_int('NEWSWIRE_SUMMARY_MAX_TOKENS', SUMMARY_MAX_TOKENS),
            summary_temperature=_env_float('NEWSWIRE_SUMMARY_TEMPERATURE', SUMMARY_TEMPERATURE),
        )
