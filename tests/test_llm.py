import asyncio

import pytest
import tenacity

import newswire.llm as llm
from newswire.errors import ConfigError
from newswire.llm import CompletionOptions, LLMConfig, complete, make_completer


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('LLM_PROVIDER', 'LLM_MODEL', 'ANTHROPIC_API_KEY', 'OPENAI_API_KEY', 'LLM_API_KEY',
                 'OPENAI_API_BASE', 'LLM_BASE_URL'):
        monkeypatch.delenv(name, raising=False)


def test_from_env_anthropic_default(monkeypatch):
    monkeypatch.setenv('ANTHROPIC_API_KEY', 'sk-ant')
    cfg = LLMConfig.from_env()
    assert cfg.provider == 'anthropic'
    assert cfg.api_key == 'sk-ant'
    assert cfg.model


def test_from_env_openai_compatible(monkeypatch):
    monkeypatch.setenv('LLM_PROVIDER', 'OpenAI')
    monkeypatch.setenv('LLM_MODEL', 'llama-3.1-8b-instruct')
    monkeypatch.setenv('LLM_BASE_URL', 'http://localhost:8080/v1')
    cfg = LLMConfig.from_env()
    assert cfg.provider == 'openai'
    assert cfg.model == 'llama-3.1-8b-instruct'
    assert cfg.base_url == 'http://localhost:8080/v1'


def test_from_env_overrides():
    cfg = LLMConfig.from_env(provider='openai', model='gpt-x')
    assert (cfg.provider, cfg.model) == ('openai', 'gpt-x')


def test_unknown_provider():
    with pytest.raises(ConfigError):
        LLMConfig.from_env(provider='carrier-pigeon')


def test_complete_reports_failure(monkeypatch):
    async def boom(prompt, config, options):
        raise RuntimeError('rate limited')

    monkeypatch.setattr(llm, 'call_llm', boom)
    result = asyncio.run(complete('hi', LLMConfig(provider='openai', model='m'), CompletionOptions()))
    assert not result.success
    assert 'rate limited' in result.error
    assert result.text == ''


def test_completer_passes_prompt_and_options(monkeypatch):
    seen = {}

    async def fake(prompt, config, options):
        seen.update(prompt=prompt, config=config, options=options)
        return '{"items": []}'

    monkeypatch.setattr(llm, 'call_llm', fake)
    cfg = LLMConfig(provider='anthropic', model='m')
    opts = CompletionOptions(max_output_tokens=50, temperature=0.2)
    result = asyncio.run(make_completer(cfg)('prompt text', opts))
    assert result.success and result.text == '{"items": []}'
    assert seen == {'prompt': 'prompt text', 'config': cfg, 'options': opts}


def test_call_llm_retries_then_reraises(monkeypatch):
    attempts = []

    async def flaky(prompt, config, options):
        attempts.append(1)
        raise ConnectionError('down')

    monkeypatch.setattr(llm, '_call_openai', flaky)
    monkeypatch.setattr(llm, 'wait_exponential', lambda **kw: tenacity.wait_none())
    cfg = LLMConfig(provider='openai', model='m', max_attempts=3)
    with pytest.raises(ConnectionError):
        asyncio.run(llm.call_llm('p', cfg, CompletionOptions()))
    assert len(attempts) == 3


def test_call_llm_unknown_provider():
    with pytest.raises(ConfigError):
        asyncio.run(llm.call_llm('p', LLMConfig(provider='nope', model='m'), CompletionOptions()))
