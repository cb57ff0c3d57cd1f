import asyncio
import json

from conftest import make_article

from newswire.llm import CompletionOptions, CompletionResult
from newswire.summarizer import (
    apply_summaries,
    build_prompt,
    parse_json_response,
    summarize_articles,
)


class FakeCompleter:
    def __init__(self, text: str = '', success: bool = True, error: str | None = None, exc: Exception | None = None):
        self.result = CompletionResult(text=text, success=success, error=error)
        self.exc = exc
        self.calls: list[tuple[str, CompletionOptions]] = []

    async def __call__(self, prompt: str, options: CompletionOptions) -> CompletionResult:
        self.calls.append((prompt, options))
        if self.exc:
            raise self.exc
        return self.result


def _three():
    return [
        make_article('One', 'BBC', summary='first'),
        make_article('Two', 'AP', summary='second'),
        make_article('Three', 'NPR', summary='third'),
    ]


def test_empty_input_makes_no_call():
    complete = FakeCompleter('{"items": []}')
    assert asyncio.run(summarize_articles([], complete)) == []
    assert complete.calls == []


def test_index_alignment_with_fewer_items():
    articles = _three()
    response = json.dumps({'items': [
        {'title': 'One, rewritten', 'summary': 'Sentence one. Sentence two.'},
        {'title': 'Two, rewritten', 'summary': 'Another summary.'},
    ]})
    out = asyncio.run(summarize_articles(articles, FakeCompleter(response)))
    assert len(out) == 3
    assert (out[0].title, out[0].summary) == ('One, rewritten', 'Sentence one. Sentence two.')
    assert (out[1].title, out[1].summary) == ('Two, rewritten', 'Another summary.')
    assert out[2] == articles[2]


def test_prose_wrapped_json_is_recovered():
    articles = _three()[:1]
    response = 'Here you go: {"items": [{"title": "One!", "summary": "Short and neutral."}]} thanks'
    [out] = asyncio.run(summarize_articles(articles, FakeCompleter(response)))
    assert out.title == 'One!'
    assert out.summary == 'Short and neutral.'


def test_unusable_response_returns_originals():
    articles = _three()
    for text in ('no json at all', '{"items": [ broken', '} backwards {', '[1, 2, 3]', ''):
        out = asyncio.run(summarize_articles(articles, FakeCompleter(text)))
        assert out == articles


def test_failed_completion_returns_originals():
    articles = _three()
    out = asyncio.run(summarize_articles(articles, FakeCompleter(success=False, error='503')))
    assert out == articles


def test_raising_completer_returns_originals():
    articles = _three()
    out = asyncio.run(summarize_articles(articles, FakeCompleter(exc=RuntimeError('boom'))))
    assert out == articles


def test_blank_or_missing_fields_keep_originals():
    articles = _three()
    parsed = {'items': [
        {'title': '   ', 'summary': 'New first.'},
        {'summary': None},
        'not a dict',
    ]}
    out = apply_summaries(articles, parsed)
    assert (out[0].title, out[0].summary) == ('One', 'New first.')
    assert out[1] == articles[1]
    assert out[2] == articles[2]


def test_only_title_and_summary_change():
    article = make_article('Orig', 'Guardian', url='https://g.example/x', published_at='Mon, 1 Jan 2026')
    parsed = {'items': [{'title': 'New', 'summary': 'Sum.', 'source': 'Hacked', 'url': 'https://evil.example'}]}
    [out] = apply_summaries([article], parsed)
    assert out.source == 'Guardian'
    assert out.url == 'https://g.example/x'
    assert out.published_at == 'Mon, 1 Jan 2026'


def test_missing_items_key_keeps_everything():
    articles = _three()
    assert apply_summaries(articles, {'result': 'ok'}) == articles
    assert apply_summaries(articles, {'items': 'nope'}) == articles


def test_extra_items_are_ignored():
    articles = _three()[:1]
    parsed = {'items': [{'title': 'A', 'summary': 'a'}, {'title': 'B', 'summary': 'b'}]}
    out = apply_summaries(articles, parsed)
    assert len(out) == 1
    assert out[0].title == 'A'


def test_parse_json_response():
    assert parse_json_response('{"items": []}') == {'items': []}
    assert parse_json_response('```json\n{"items": [{"title": "x"}]}\n```') == {'items': [{'title': 'x'}]}
    assert parse_json_response('nothing here') is None
    assert parse_json_response('only { an opening') is None
    assert parse_json_response('') is None


def test_prompt_lists_every_article_and_bounds_summary():
    articles = _three()
    articles[1] = make_article('Two', 'AP', summary='y' * 1000)
    prompt = build_prompt(articles)
    assert '1. Title: One' in prompt
    assert '2. Title: Two' in prompt
    assert '3. Title: Three' in prompt
    assert 'Source: NPR' in prompt
    assert 'Published: Sat, 17 Oct 2026 09:00:00 GMT' in prompt
    assert 'y' * 399 + '…' in prompt
    assert 'y' * 400 not in prompt
    assert '"items"' in prompt


def test_options_are_passed_through():
    complete = FakeCompleter('{"items": []}')
    options = CompletionOptions(max_output_tokens=123, temperature=0.1)
    asyncio.run(summarize_articles(_three(), complete, options))
    [(prompt, passed)] = complete.calls
    assert passed is options
    assert 'Existing summary: first' in prompt


def test_deeply_nested_response_returns_originals():
    articles = _three()
    text = '{"items": ' + '[' * 100000 + '}'
    out = asyncio.run(summarize_articles(articles, FakeCompleter(text)))
    assert out == articles
    assert parse_json_response(text) is None


def test_completer_returning_wrong_type_returns_originals():
    articles = _three()

    async def complete(prompt, options):
        return '{"items": []}'

    assert asyncio.run(summarize_articles(articles, complete)) == articles


def test_completion_without_text_returns_originals():
    articles = _three()

    async def complete(prompt, options):
        return CompletionResult(text=None)

    assert asyncio.run(summarize_articles(articles, complete)) == articles
