'''
RSS feed parser: pulls <item> entries out of a raw feed document with
tolerant pattern matching and turns them into Article records.

Only the RSS vocabulary (<item>, <title>, <link>, <pubDate>, <description>) is
recognized. Atom <entry> documents yield no articles.

feedparser is deliberately not used here: it would accept Atom as well, and it
sanitizes text its own way, while this parser's cleaning rules (which tags become
breaks, which entities decode and in what order, where descriptions are cut)
decide exactly what ends up in a summary and in the dedup key.
'''

import re

import structlog

from newswire.config import MAX_ARTICLES_PER_SOURCE
from newswire.models import Article


logger = structlog.get_logger()

DESCRIPTION_MAX_CHARS = 320
ELLIPSIS = '…'

ITEM_PATTERN = re.compile(r'<item\b.*?</item>', re.DOTALL | re.IGNORECASE)
TITLE_PATTERN = re.compile(
    r'<title(?:\s[^>]*)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</title>|<title(?:\s[^>]*)?>(.*?)</title>',
    re.DOTALL | re.IGNORECASE,
)
LINK_PATTERN = re.compile(r'<link>(.*?)</link>', re.DOTALL | re.IGNORECASE)
PUBDATE_PATTERN = re.compile(r'<pubDate>(.*?)</pubDate>', re.DOTALL | re.IGNORECASE)
DESCRIPTION_PATTERN = re.compile(
    r'<description(?:\s[^>]*)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</description>'
    r'|<description(?:\s[^>]*)?>(.*?)</description>',
    re.DOTALL | re.IGNORECASE,
)

BREAK_PATTERN = re.compile(r'<br\s*/?>|</p>|</div>', re.IGNORECASE)
TAG_PATTERN = re.compile(r'<[^>]+>')
WHITESPACE_PATTERN = re.compile(r'\s+')

# Applied in this order, each over the output of the one before
ENTITIES = [
    (re.compile(r'&nbsp;', re.IGNORECASE), ' '),
    (re.compile(r'&amp;', re.IGNORECASE), '&'),
    (re.compile(r'&lt;', re.IGNORECASE), '<'),
    (re.compile(r'&gt;', re.IGNORECASE), '>'),
    (re.compile(r'&quot;', re.IGNORECASE), '"'),
    (re.compile(r'&apos;', re.IGNORECASE), "'"),
    (re.compile(r'&#39;', re.IGNORECASE), "'"),
]


def clean_text(html: str) -> str:
    '''
    Reduce feed markup to plain text: block breaks become spaces, remaining tags
    are stripped, a small set of named entities is decoded, whitespace collapsed.
    '''
    if not html:
        return ''
    text = BREAK_PATTERN.sub(' ', html)
    text = TAG_PATTERN.sub('', text)
    # Sequential, so '&amp;lt;' ends up as '<'
    for pattern, replacement in ENTITIES:
        text = pattern.sub(replacement, text)
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def truncate(text: str, limit: int) -> str:
    '''Cut text to at most limit characters, the last one an ellipsis if anything was cut.'''
    if len(text) <= limit:
        return text
    return text[: limit - 1] + ELLIPSIS


def _first_group(pattern: re.Pattern, fragment: str) -> str:
    m = pattern.search(fragment)
    if not m:
        return ''
    return next((g for g in m.groups() if g), '').strip()


def parse_item(fragment: str, source: str, max_description: int = DESCRIPTION_MAX_CHARS) -> Article | None:
    '''
    Parse one <item> fragment. Returns None when the title or link is missing.
    '''
    title = clean_text(_first_group(TITLE_PATTERN, fragment))
    url = _first_group(LINK_PATTERN, fragment)
    if not title or not url:
        return None
    published_at = _first_group(PUBDATE_PATTERN, fragment)
    description = truncate(clean_text(_first_group(DESCRIPTION_PATTERN, fragment)), max_description)
    return Article(title=title, source=source, url=url, published_at=published_at, summary=description)


def parse_feed(
    document: str,
    source: str,
    limit: int = MAX_ARTICLES_PER_SOURCE,
    max_description: int = DESCRIPTION_MAX_CHARS,
) -> list[Article]:
    '''
    Extract up to `limit` articles from a feed document, in document order.

    The first `limit` items are considered; any of them missing a title or link
    is dropped, so fewer than `limit` articles may come back. A malformed item is
    skipped; a document that can't be read at all yields an empty list.
    '''
    if not isinstance(document, str) or not document:
        return []
    try:
        fragments = ITEM_PATTERN.findall(document)[:limit]
    except Exception:
        logger.warning('unparsable feed document', source=source, exc_info=True)
        return []

    articles: list[Article] = []
    for fragment in fragments:
        try:
            article = parse_item(fragment, source, max_description=max_description)
        except Exception:
            logger.debug('skipping malformed feed item', source=source, exc_info=True)
            continue
        if article is not None:
            articles.append(article)
    if not fragments:
        logger.info('no feed items found', source=source)
    return articles
