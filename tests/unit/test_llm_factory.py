"""
LLM factory and provider services.

SDK clients are patched; no network calls.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from dme.llm.factory import get_configured_llm_service, get_llm_service
from dme.llm.services import ClaudeService, OpenAIService


class TestGetLLMService:

    def test_default_provider(self, settings):
        settings.LLM_PROVIDER = 'anthropic'
        assert isinstance(get_llm_service(), ClaudeService)

    def test_openai_provider(self, settings):
        settings.LLM_PROVIDER = 'openai'
        assert isinstance(get_llm_service(), OpenAIService)

    def test_unknown_provider(self, settings):
        settings.LLM_PROVIDER = 'llama'
        with pytest.raises(ValueError) as exc_info:
            get_llm_service()
        assert 'llama' in str(exc_info.value)


class TestGetConfiguredLLMService:

    def test_disabled(self, settings, monkeypatch):
        settings.LLM_ENABLED = False
        monkeypatch.setenv('ANTHROPIC_API_KEY', 'sk-test')
        assert get_configured_llm_service() is None

    def test_missing_key(self, settings, monkeypatch):
        settings.LLM_ENABLED = True
        settings.LLM_PROVIDER = 'anthropic'
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        assert get_configured_llm_service() is None

    def test_blank_key(self, settings, monkeypatch):
        settings.LLM_ENABLED = True
        settings.LLM_PROVIDER = 'openai'
        monkeypatch.setenv('OPENAI_API_KEY', '   ')
        assert get_configured_llm_service() is None

    def test_unknown_provider_is_skipped(self, settings):
        settings.LLM_ENABLED = True
        settings.LLM_PROVIDER = 'llama'
        assert get_configured_llm_service() is None

    def test_configured(self, settings, monkeypatch):
        settings.LLM_ENABLED = True
        settings.LLM_PROVIDER = 'openai'
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-test')
        assert isinstance(get_configured_llm_service(), OpenAIService)


class TestClaudeService:

    def test_complete(self, settings, monkeypatch):
        settings.LLM_MAX_TOKENS = 1000
        settings.LLM_TEMPERATURE = 0.1
        settings.LLM_TIMEOUT_SECONDS = 30
        monkeypatch.setenv('ANTHROPIC_API_KEY', 'sk-ant-test')
        monkeypatch.delenv('ANTHROPIC_MODEL', raising=False)

        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text='{"device": "CPAP"}')],
            usage=SimpleNamespace(input_tokens=100, output_tokens=20),
        )
        with patch('anthropic.Anthropic', return_value=client) as anthropic_cls:
            response = ClaudeService().complete('system', 'user')

        anthropic_cls.assert_called_once_with(api_key='sk-ant-test', timeout=30, max_retries=0)
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs['system'] == 'system'
        assert kwargs['messages'] == [{'role': 'user', 'content': 'user'}]
        assert kwargs['max_tokens'] == 1000
        assert kwargs['temperature'] == 0.1
        assert response.content == '{"device": "CPAP"}'
        assert response.model == ClaudeService.DEFAULT_MODEL
        assert response.total_tokens == 120

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        with pytest.raises(ValueError):
            ClaudeService().complete('system', 'user')


class TestOpenAIService:

    def test_complete(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-test')
        monkeypatch.setenv('OPENAI_MODEL', 'gpt-4o-mini')

        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"device": "Walker"}'))],
            usage=SimpleNamespace(total_tokens=77),
        )
        with patch('openai.OpenAI', return_value=client):
            response = OpenAIService().complete('system', 'user')

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs['model'] == 'gpt-4o-mini'
        assert kwargs['messages'][0] == {'role': 'system', 'content': 'system'}
        assert response.content == '{"device": "Walker"}'
        assert response.model == 'gpt-4o-mini'
        assert response.total_tokens == 77
