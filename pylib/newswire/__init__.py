'''
newswire

Aggregates headlines from several RSS feeds, dedupes and interleaves them by
source, adds short LLM summaries, and serves the result from a time-bounded
cache that keeps serving the last good batch when a refresh fails.

Pipeline: fetch (concurrent) → parse → dedupe/interleave → summarize → cache
'''

from newswire.cache import NewsCache
from newswire.config import Settings
from newswire.errors import ConfigError, GenerationError, NewswireError
from newswire.models import Article, NewsBatch, Source
from newswire.pipeline import generate_news, make_generator

__all__ = [
    'Article',
    'ConfigError',
    'GenerationError',
    'NewsBatch',
    'NewsCache',
    'NewswireError',
    'Settings',
    'Source',
    'generate_news',
    'make_generator',
]
