'''CLI for the headline aggregator: one-shot fetch, or a scheduled warm cache.'''

import asyncio
import json

import fire
import structlog
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from newswire.cache import NewsCache
from newswire.config import Settings
from newswire.fetchers import create_fetcher
from newswire.llm import LLMConfig, make_completer
from newswire.models import NewsBatch
from newswire.pipeline import make_generator
from newswire.scheduler import get_refresher


def configure_logging() -> None:
    '''Console logging with standard Python tracebacks instead of Rich's fancy format.'''
    from structlog.contextvars import merge_contextvars
    from structlog.dev import ConsoleRenderer, plain_traceback, set_exc_info
    from structlog.processors import StackInfoRenderer, TimeStamper, add_log_level

    structlog.configure(
        processors=[
            merge_contextvars,
            add_log_level,
            StackInfoRenderer(),
            set_exc_info,
            TimeStamper(fmt='%Y-%m-%d %H:%M:%S', utc=True),
            ConsoleRenderer(exception_formatter=plain_traceback),
        ],
    )


def build_cache(settings: Settings, provider: str = '', model: str = '', llm_base_url: str = '') -> NewsCache:
    '''Wire settings, fetcher and LLM config (env, with optional CLI overrides) into a NewsCache.'''
    llm_config = LLMConfig.from_env(provider=provider or None, model=model or None)
    if llm_base_url:
        llm_config.base_url = llm_base_url
    fetcher = create_fetcher('http', timeout=settings.fetch_timeout)
    generate = make_generator(settings, fetcher, make_completer(llm_config))
    return NewsCache(generate, ttl_seconds=settings.cache_ttl_seconds)


def render_batch(console: Console, batch: NewsBatch) -> None:
    '''Print a batch as a table.'''
    if not batch.articles:
        console.print('[yellow]No stories available right now.[/yellow]')
        return
    table = Table(title=f'{len(batch.articles)} stories, generated {batch.generated_at:%Y-%m-%d %H:%M} UTC')
    table.add_column('#', justify='right')
    table.add_column('Source', style='cyan', no_wrap=True)
    table.add_column('Story')
    for i, a in enumerate(batch.articles, start=1):
        table.add_row(
            str(i),
            escape(a.source),
            f'[bold]{escape(a.title)}[/bold]\n{escape(a.summary)}\n[dim]{escape(a.url)}[/dim]',
        )
    console.print(table)


def main() -> None:
    '''newswire: AI-summarized headlines from several news feeds.'''
    load_dotenv()
    configure_logging()
    fire.Fire({
        'fetch': fetch,
        'serve': serve,
    })


def fetch(as_json: bool = False, provider: str = '', model: str = '', llm_base_url: str = '') -> None:
    '''
    Generate one batch and print it.
    as_json: print the published API shape ({generatedAt, ttlSeconds, articles}) as JSON.
    provider: llm provider (anthropic | openai). Default from LLM_PROVIDER env.
    model: model name. Default from LLM_MODEL env.
    llm_base_url: base URL for OpenAI-compatible API (e.g. http://localhost:8080/v1).
    '''
    cache = build_cache(Settings.from_env(), provider, model, llm_base_url)
    batch = asyncio.run(cache.get_current())
    if as_json:
        print(json.dumps(batch.to_dict(), ensure_ascii=False, indent=2))
    else:
        render_batch(Console(), batch)


def serve(
    interval: float = 0,
    scheduler: str = 'asyncio',
    provider: str = '',
    model: str = '',
    llm_base_url: str = '',
) -> None:
    '''
    Keep the cache warm: refresh every interval seconds (default: the cache TTL).
    scheduler: asyncio (default) or apscheduler.
    provider, model, llm_base_url: LLM config (see fetch).
    '''
    console = Console()
    settings = Settings.from_env()
    cache = build_cache(settings, provider, model, llm_base_url)
    interval = interval or settings.cache_ttl_seconds

    refresher = get_refresher(
        scheduler, cache, interval_seconds=interval, on_batch=lambda batch: render_batch(console, batch)
    )

    console.print(Panel(f'Refreshing {len(settings.sources)} feeds every {interval:.0f}s', title='newswire'))
    asyncio.run(_serve(refresher))


async def _serve(refresher) -> None:
    await refresher.start()
    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await refresher.stop()
