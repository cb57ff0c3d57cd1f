'''
Batch summarizer: one LLM request covering the whole merged batch, asking for
JSON back, then a best-effort reconcile of whatever comes back onto the batch.

Summarization never fails the pipeline. Anything short of usable JSON leaves
the articles as they were.
'''

import json
from collections.abc import Awaitable, Callable
from dataclasses import replace

import structlog

from newswire.llm import CompletionOptions, CompletionResult
from newswire.models import Article
from newswire.parser import truncate


logger = structlog.get_logger()

PROMPT_SUMMARY_MAX_CHARS = 400

Completer = Callable[[str, CompletionOptions], Awaitable[CompletionResult]]

PROMPT_HEADER = '''You are an editorial assistant for a professional market research firm.
You are given a list of news headlines with short descriptions.
For each item, produce a 2–3 sentence summary written for an informed general audience.
Avoid sensational language; focus on what happened and why it matters. Keep a neutral tone.

Return your answer as JSON with the following shape, one entry per input item, in the same order:
{ "items": [ { "title": string, "summary": string } ] }

Items:'''


def build_prompt(articles: list[Article], max_chars: int = PROMPT_SUMMARY_MAX_CHARS) -> str:
    '''Render the numbered item list under the instruction header.'''
    lines = [PROMPT_HEADER]
    for i, a in enumerate(articles, start=1):
        lines.append(
            f'{i}. Title: {a.title}\n'
            f'Source: {a.source}\n'
            f'Published: {a.published_at}\n'
            f'Existing summary: {truncate(a.summary, max_chars)}'
        )
    return '\n'.join(lines)


def parse_json_response(text: str):
    '''
    Parse model output as JSON. If the whole text isn't JSON, try the span from
    the first '{' to the last '}'. Returns None when neither parses.
    '''
    if not text:
        return None
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass
    start = text.find('{')
    end = text.rfind('}')
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start : end + 1])
    except (ValueError, RecursionError):
        return None


def _clean_field(item: dict, key: str) -> str:
    value = item.get(key)
    if not isinstance(value, str):
        return ''
    return value.strip()


def apply_summaries(articles: list[Article], parsed: dict) -> list[Article]:
    '''
    Overlay item i of parsed['items'] onto article i.

    Only non-empty title/summary strings replace the originals; articles past the
    end of the item list keep their fields.
    '''
    items = parsed.get('items')
    if not isinstance(items, list):
        items = []
    out: list[Article] = []
    for index, article in enumerate(articles):
        item = items[index] if index < len(items) else None
        if not isinstance(item, dict):
            out.append(article)
            continue
        out.append(replace(
            article,
            title=_clean_field(item, 'title') or article.title,
            summary=_clean_field(item, 'summary') or article.summary,
        ))
    return out


async def summarize_articles(
    articles: list[Article],
    complete: Completer,
    options: CompletionOptions | None = None,
) -> list[Article]:
    '''
    Summarize a batch in one request. Returns a same-length list; on any failure
    the input articles come back unchanged.
    '''
    if not articles:
        return articles
    options = options or CompletionOptions()
    prompt = build_prompt(articles)

    try:
        result = await complete(prompt, options)
    except Exception as e:
        result = CompletionResult(success=False, error=f'{type(e).__name__}: {e}')
    if not isinstance(result, CompletionResult):
        result = CompletionResult(success=False, error=f'completer returned {type(result).__name__}')
    if not result.success:
        logger.warning('summarization failed', error=result.error, articles=len(articles))
        return articles

    text = result.text if isinstance(result.text, str) else ''
    parsed = parse_json_response(text)
    if not isinstance(parsed, dict):
        logger.warning('summarization returned no usable JSON', response=text[:200])
        return articles

    summarized = apply_summaries(articles, parsed)
    items = parsed.get('items')
    logger.info('summarized articles', articles=len(articles), items=len(items) if isinstance(items, list) else 0)
    return summarized
