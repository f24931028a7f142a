"""Clients for the knowledge-base retrieval service.

Section selection itself happens in the retrieval service; this side only
passes the topic and the size limits derived by the query analyzer.
"""

import logging
import time
from abc import ABC, abstractmethod

import httpx

from src.adapters.errors import RetrievalError

logger = logging.getLogger(__name__)


class RetrievalClient(ABC):
    """Returns supporting context for a topic."""

    @abstractmethod
    async def get_context_for_topic(
        self, topic: str, max_tokens: int, max_sections: int
    ) -> str:
        """
        Fetch a block of supporting text.

        Args:
            topic: The (resolved) user prompt
            max_tokens: Token budget for the returned context
            max_sections: Maximum number of sections to include

        Raises:
            RetrievalError: If the service fails
        """
        pass

    async def close(self) -> None:
        return None


class StaticRetrievalClient(RetrievalClient):
    """Serves a fixed fallback context when no retrieval service is configured."""

    def __init__(self, context: str):
        self.context = context

    async def get_context_for_topic(
        self, topic: str, max_tokens: int, max_sections: int
    ) -> str:
        return self.context


class HttpRetrievalClient(RetrievalClient):
    """Retrieval over HTTP: ``POST {base_url}/context``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the HTTP retrieval client.

        Args:
            base_url: Root URL of the retrieval service.
            timeout: Request timeout in seconds.
            client: Pre-built client, mainly for tests.
        """
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def get_context_for_topic(
        self, topic: str, max_tokens: int, max_sections: int
    ) -> str:
        start_time = time.time()
        try:
            response = await self.client.post(
                f"{self.base_url}/context",
                json={
                    "topic": topic,
                    "maxTokens": max_tokens,
                    "maxSections": max_sections,
                },
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Retrieval failed for topic '{topic[:50]}...': {e}")
            raise RetrievalError(
                f"Knowledge-base retrieval failed: {e}",
                details={"max_sections": max_sections, "max_tokens": max_tokens},
            ) from e

        context = payload.get("context") if isinstance(payload, dict) else None
        if not isinstance(context, str):
            raise RetrievalError("Knowledge-base retrieval returned no context")

        logger.info(
            f"📊 RAG: {max_sections} sections, {len(context)} chars "
            f"in {time.time() - start_time:.2f}s"
        )
        return context

    async def close(self) -> None:
        await self.client.aclose()
