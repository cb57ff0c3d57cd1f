'''
LLM provider abstraction for article summaries. Supports Anthropic (Claude) and
OpenAI-compatible APIs (OpenAI itself, or a local/hosted Llama behind an
OpenAI-style endpoint).

The model id is opaque configuration; callers only see text in, text out.
'''

from __future__ import annotations

import os
from dataclasses import dataclass

import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from newswire.errors import ConfigError


logger = structlog.get_logger()

PROVIDERS = ('anthropic', 'openai')


@dataclass
class LLMConfig:
    '''Configuration for LLM calls.'''

    provider: str  # 'anthropic' | 'openai'
    model: str
    api_key: str | None = None
    base_url: str | None = None  # For openai: e.g. http://localhost:8080/v1
    max_attempts: int = 3

    @classmethod
    def from_env(cls, provider: str | None = None, model: str | None = None) -> LLMConfig:
        '''Build config from env vars.'''
        prov = (provider or os.environ.get('LLM_PROVIDER') or 'anthropic').lower()
        if prov == 'anthropic':
            return cls(
                provider='anthropic',
                model=model or os.environ.get('LLM_MODEL') or 'claude-3-5-haiku-latest',
                api_key=os.environ.get('ANTHROPIC_API_KEY'),
            )
        if prov == 'openai':
            return cls(
                provider='openai',
                model=model or os.environ.get('LLM_MODEL') or 'gpt-4o-mini',
                api_key=os.environ.get('OPENAI_API_KEY') or os.environ.get('LLM_API_KEY'),
                base_url=os.environ.get('OPENAI_API_BASE') or os.environ.get('LLM_BASE_URL') or None,
            )
        raise ConfigError(f'Unknown LLM provider: {prov}. Use {" or ".join(PROVIDERS)}.')


@dataclass
class CompletionOptions:
    '''Per-request generation knobs.'''

    max_output_tokens: int = 800
    temperature: float = 0.4


@dataclass
class CompletionResult:
    '''Outcome of one completion request: the text, or why there isn't any.'''

    text: str = ''
    success: bool = True
    error: str | None = None


async def call_llm(prompt: str, config: LLMConfig, options: CompletionOptions) -> str:
    '''
    Call the configured LLM with a single user prompt. Returns the assistant text.

    Transient failures are retried (config.max_attempts, exponential backoff);
    the last error is re-raised.
    '''
    if config.provider == 'anthropic':
        call = _call_anthropic
    elif config.provider == 'openai':
        call = _call_openai
    else:
        raise ConfigError(f'Unknown provider: {config.provider}')

    @retry(
        stop=stop_after_attempt(max(1, config.max_attempts)),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _attempt() -> str:
        return await call(prompt, config, options)

    return await _attempt()


async def complete(prompt: str, config: LLMConfig, options: CompletionOptions) -> CompletionResult:
    '''
    Like call_llm, but reports failure as a CompletionResult instead of raising.
    '''
    try:
        text = await call_llm(prompt, config, options)
    except Exception as e:
        logger.warning('llm call failed', provider=config.provider, model=config.model, error=str(e))
        return CompletionResult(success=False, error=f'{type(e).__name__}: {e}')
    return CompletionResult(text=text)


async def _call_anthropic(prompt: str, config: LLMConfig, options: CompletionOptions) -> str:
    from anthropic import AsyncAnthropic

    client = AsyncAnthropic(api_key=config.api_key)
    msg = await client.messages.create(
        model=config.model,
        max_tokens=options.max_output_tokens,
        temperature=options.temperature,
        messages=[{'role': 'user', 'content': prompt}],
    )
    return ''.join(block.text for block in msg.content if getattr(block, 'type', '') == 'text')


async def _call_openai(prompt: str, config: LLMConfig, options: CompletionOptions) -> str:
    from openai import AsyncOpenAI

    if not config.model:
        raise ConfigError('LLM_MODEL required for OpenAI-compatible provider (e.g. gpt-4o-mini, llama-3.1-8b-instruct)')
    client = AsyncOpenAI(
        base_url=config.base_url,
        api_key=config.api_key or 'not-needed',  # Local servers often skip auth
    )
    resp = await client.chat.completions.create(
        model=config.model,
        max_tokens=options.max_output_tokens,
        temperature=options.temperature,
        messages=[{'role': 'user', 'content': prompt}],
    )
    return resp.choices[0].message.content or ''


def make_completer(config: LLMConfig):
    '''Bind a config, giving the (prompt, options) -> CompletionResult callable the summarizer expects.'''

    async def _complete(prompt: str, options: CompletionOptions) -> CompletionResult:
        return await complete(prompt, config, options)

    return _complete
