from datetime import datetime, timedelta, timezone

import pytest

from newswire.models import Article, NewsBatch


T0 = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    '''Settable clock; call it to get "now".'''

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def make_article(title: str, source: str = 'Wire', **kw) -> Article:
    slug = title.lower().replace(' ', '-')
    return Article(
        title=title,
        source=source,
        url=kw.pop('url', f'https://example.com/{source.lower()}/{slug}'),
        published_at=kw.pop('published_at', 'Sat, 17 Oct 2026 09:00:00 GMT'),
        summary=kw.pop('summary', f'About {title}.'),
    )


def make_batch(now: datetime, *titles: str, ttl: int = 900) -> NewsBatch:
    return NewsBatch(generated_at=now, ttl_seconds=ttl, articles=tuple(make_article(t) for t in titles))


def rss_item(title: str | None = None, link: str | None = None, pub: str = '', desc: str = '') -> str:
    parts = ['<item>']
    if title is not None:
        parts.append(f'<title>{title}</title>')
    if link is not None:
        parts.append(f'<link>{link}</link>')
    if pub:
        parts.append(f'<pubDate>{pub}</pubDate>')
    if desc:
        parts.append(f'<description>{desc}</description>')
    parts.append('</item>')
    return ''.join(parts)


def rss_document(*items: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0"><channel><title>Test feed</title>\n'
        + '\n'.join(items)
        + '\n</channel></rss>'
    )


@pytest.fixture
def clock():
    return FakeClock()
