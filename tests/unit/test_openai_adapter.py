"""Unit tests for the OpenAI-compatible chat adapter."""

from unittest.mock import AsyncMock, Mock

import pytest
from tenacity import wait_none

from config.settings import Settings
from src.adapters.errors import LanguageModelError
from src.adapters.llm_adapter import ChatMessage
from src.adapters.openai_adapter import OpenAICompatibleAdapter
from src.query_analysis.options import GenerationOptions


def _completion(content):
    response = Mock()
    response.choices = [Mock(message=Mock(content=content))]
    response.usage = Mock(prompt_tokens=10, completion_tokens=5)
    return response


@pytest.fixture
def mock_client():
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=_completion("Hello!"))
    client.close = AsyncMock()
    return client


def _adapter(client, **overrides):
    values = {
        "llm_model": "test-model",
        "llm_provider": "groq",
        "llm_max_retries": 3,
        **overrides,
    }
    settings = Settings(**values)
    adapter = OpenAICompatibleAdapter(settings=settings, client=client)
    adapter.retry_wait = wait_none()
    return adapter


OPTIONS = GenerationOptions(max_tokens=300, temperature=0.2, num_ctx=4096)
MESSAGES = [ChatMessage("system", "Be brief."), ChatMessage("user", "Hi")]


class TestOpenAICompatibleAdapter:
    @pytest.mark.asyncio
    async def test_chat_maps_options(self, mock_client):
        adapter = _adapter(mock_client)

        reply = await adapter.chat(MESSAGES, OPTIONS)

        assert reply == "Hello!"
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 300
        assert kwargs["temperature"] == 0.2
        assert kwargs["top_p"] == 0.5
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi"},
        ]
        assert "extra_body" not in kwargs

    @pytest.mark.asyncio
    async def test_ollama_receives_context_options(self, mock_client):
        adapter = _adapter(mock_client, llm_provider="ollama")
        await adapter.chat(MESSAGES, OPTIONS)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["extra_body"] == {
            "options": {"num_ctx": 4096, "top_k": 20, "repeat_penalty": 1.1}
        }
        assert adapter.get_provider_info().provider == "ollama"

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, mock_client):
        mock_client.chat.completions.create = AsyncMock(
            side_effect=[RuntimeError("rate limited"), _completion("ok")]
        )
        adapter = _adapter(mock_client)

        assert await adapter.chat(MESSAGES, OPTIONS) == "ok"
        assert mock_client.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_is_labeled(self, mock_client):
        mock_client.chat.completions.create = AsyncMock(side_effect=RuntimeError("down"))
        adapter = _adapter(mock_client)

        with pytest.raises(LanguageModelError) as exc_info:
            await adapter.chat(MESSAGES, OPTIONS)

        assert exc_info.value.code == "LLM_ERROR"
        assert mock_client.chat.completions.create.await_count == 3

    @pytest.mark.asyncio
    async def test_empty_content_becomes_empty_string(self, mock_client):
        mock_client.chat.completions.create = AsyncMock(return_value=_completion(None))
        adapter = _adapter(mock_client)

        assert await adapter.chat(MESSAGES, OPTIONS) == ""

    def test_provider_info(self, mock_client):
        info = _adapter(mock_client).get_provider_info()

        assert info.provider == "groq"
        assert info.model == "test-model"

    @pytest.mark.asyncio
    async def test_close(self, mock_client):
        await _adapter(mock_client).close()
        mock_client.close.assert_awaited_once()
