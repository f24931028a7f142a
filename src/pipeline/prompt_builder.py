"""Assembly of system prompts and chat messages from prompts.yaml."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from src.adapters.llm_adapter import ChatMessage
from src.conversation.context_store import ConversationContext
from src.intent_detection.types import IntentClassificationResult

logger = logging.getLogger(__name__)


class PromptBuilder:
    """Builds the messages sent to the language model."""

    def __init__(self, prompts_path: str | Path | None = None, year: int | None = None):
        """Initialize the builder.

        Args:
            prompts_path: Path to the prompts YAML file.
                If None, uses default from settings
            year: Year quoted for position holders; defaults to the current year
        """
        self.year = year or datetime.now().year
        self._prompts = self._load_prompts(prompts_path)

    @staticmethod
    def _load_prompts(prompts_path: str | Path | None) -> dict[str, Any]:
        if prompts_path is None:
            from config.settings import Settings

            prompts_path = Settings().prompts_path

        with open(prompts_path, encoding="utf-8") as f:
            prompts = yaml.safe_load(f)

        if not isinstance(prompts, dict) or "knowledge_base" not in prompts:
            raise ValueError(f"Invalid prompts file: {prompts_path}")
        logger.info(f"Loaded prompts from {prompts_path}")
        return prompts

    @property
    def fallback_context(self) -> str:
        return self._prompts.get("fallback_context", "")

    @property
    def examples(self) -> list[dict[str, str]]:
        return self._prompts.get("examples") or []

    def build_knowledge_base_prompt(
        self,
        conversation_context: ConversationContext | None,
        classification: IntentClassificationResult,
        relevant_context: str,
    ) -> str:
        """Knowledge-base system prompt: instructions, then the retrieved block."""
        kb = self._prompts["knowledge_base"]
        parts = [
            kb["system"],
            kb["intent_guidance"].format(
                intent=classification.conversational_intent.value,
                hint=classification.response_hint,
            ),
            kb["style"],
        ]

        context_summary = self._summarize_context(conversation_context)
        if context_summary:
            parts.append(kb["context_line"].format(context=context_summary))

        parts.append(kb["critical_rules"].format(year=self.year))
        instructions = "\n\n".join(parts)

        return (
            f"{instructions}\n\n"
            f"{kb['kb_header']}\n"
            f"{relevant_context}\n"
            f"{kb['kb_footer']}\n\n"
            f"{kb['answer_rules']}"
        )

    def build_messages(self, system_prompt: str, prompt: str) -> list[ChatMessage]:
        """System prompt, few-shot examples, then the user prompt."""
        messages = [ChatMessage(role="system", content=system_prompt)]
        for example in self.examples:
            messages.append(ChatMessage(role="user", content=example["user"]))
            messages.append(ChatMessage(role="assistant", content=example["assistant"]))
        messages.append(ChatMessage(role="user", content=prompt))
        return messages

    @staticmethod
    def _summarize_context(context: ConversationContext | None) -> str:
        # Most recent person and topics only
        if context is None:
            return ""
        entities = context.recent_entities
        parts = []
        if entities.people:
            parts.append(f"Previously discussed: {entities.people[0]}")
        if entities.topics:
            parts.append(f"Topics: {', '.join(entities.topics[:3])}")
        return " | ".join(parts)
