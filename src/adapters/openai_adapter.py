"""Chat adapter for OpenAI-compatible completion endpoints.

Groq's cloud API and a local Ollama server both speak this protocol, so the
same adapter serves production and development.
"""

import logging
import time

import httpx
from openai import AsyncOpenAI
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from config.settings import Settings
from src.adapters.errors import LanguageModelError
from src.adapters.llm_adapter import ChatMessage, LLMAdapter, ProviderInfo
from src.query_analysis.options import GenerationOptions

logger = logging.getLogger(__name__)


class OpenAICompatibleAdapter(LLMAdapter):
    """LLM adapter backed by the ``openai`` SDK."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            settings: Application settings (loaded from the environment if omitted)
            client: Pre-built client, mainly for tests
        """
        self.settings = settings or Settings()
        self.max_attempts = self.settings.llm_max_retries
        self.retry_wait = wait_exponential(multiplier=1, min=1, max=10)

        if client is None:
            http_client = httpx.AsyncClient(
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
                timeout=httpx.Timeout(self.settings.llm_timeout_seconds),
            )
            client = AsyncOpenAI(
                api_key=self.settings.llm_api_key or "not-needed",
                base_url=self.settings.llm_api_base,
                http_client=http_client,
                max_retries=0,  # tenacity handles retries
            )
        self.client = client

        logger.info(
            f"🚀 AI Provider: {self.settings.llm_provider} ({self.settings.llm_model})"
        )

    def get_provider_info(self) -> ProviderInfo:
        return ProviderInfo(
            provider=self.settings.llm_provider, model=self.settings.llm_model
        )

    async def chat(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> str:
        request = {
            "model": self.settings.llm_model,
            "messages": [m.to_dict() for m in messages],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "top_p": options.top_p,
            "stream": False,
        }
        if self.settings.llm_provider == "ollama":
            request["extra_body"] = {
                "options": {
                    "num_ctx": options.num_ctx,
                    "top_k": options.top_k,
                    "repeat_penalty": options.repeat_penalty,
                }
            }

        start_time = time.time()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=self.retry_wait,
                reraise=True,
            ):
                with attempt:
                    response = await self.client.chat.completions.create(**request)
        except Exception as e:
            api_time = time.time() - start_time
            logger.error(f"❌ Chat completion failed after {api_time:.3f}s: {e}")
            raise LanguageModelError(
                f"Failed to generate response: {e}",
                details={"provider": self.settings.llm_provider},
            ) from e

        api_time = time.time() - start_time
        content = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                f"📊 Tokens - Input: {usage.prompt_tokens}, Output: {usage.completion_tokens}"
            )
        logger.info(f"✅ Chat completion in {api_time:.3f}s")
        return content or ""

    async def close(self) -> None:
        await self.client.close()
