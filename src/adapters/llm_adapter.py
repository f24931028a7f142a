"""Abstract base class for language model adapters."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.query_analysis.options import GenerationOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    """One message in a chat completion request."""

    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ProviderInfo:
    provider: str
    model: str


class LLMAdapter(ABC):
    """Abstract base class for all LLM adapters."""

    @abstractmethod
    async def chat(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> str:
        """
        Generate a reply for a message sequence.

        Args:
            messages: System, few-shot and user messages in order
            options: Resolved generation options

        Returns:
            Generated text

        Raises:
            LanguageModelError: If the provider call fails
        """
        pass

    @abstractmethod
    def get_provider_info(self) -> ProviderInfo:
        """Provider and model name reported to clients."""
        pass

    async def close(self) -> None:
        """Release network resources (optional implementation)."""
        return None
