"""Adapters package for external service integrations."""

from config.settings import Settings

from .errors import ChatPipelineError, LanguageModelError, RetrievalError
from .llm_adapter import ChatMessage, LLMAdapter, ProviderInfo
from .openai_adapter import OpenAICompatibleAdapter
from .retrieval_client import HttpRetrievalClient, RetrievalClient, StaticRetrievalClient


def get_llm_adapter(settings: Settings | None = None) -> LLMAdapter:
    """Build the LLM adapter for the configured provider."""
    return OpenAICompatibleAdapter(settings=settings or Settings())


def get_retrieval_client(
    settings: Settings | None = None, fallback_context: str = ""
) -> RetrievalClient:
    """
    Build the retrieval client.

    Returns:
        An HTTP client when a retrieval URL is configured, otherwise a static
        client serving the fallback context
    """
    settings = settings or Settings()
    if settings.retrieval_base_url:
        return HttpRetrievalClient(
            settings.retrieval_base_url, timeout=settings.retrieval_timeout_seconds
        )
    return StaticRetrievalClient(fallback_context)


__all__ = [
    "ChatMessage",
    "ChatPipelineError",
    "HttpRetrievalClient",
    "LLMAdapter",
    "LanguageModelError",
    "OpenAICompatibleAdapter",
    "ProviderInfo",
    "RetrievalClient",
    "RetrievalError",
    "StaticRetrievalClient",
    "get_llm_adapter",
    "get_retrieval_client",
]
