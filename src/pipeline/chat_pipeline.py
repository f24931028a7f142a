"""End-to-end chat pipeline for campus assistant requests.

This module wires intent classification, query analysis, conversation memory,
the response cache, knowledge-base retrieval and the language model into the
per-request flow behind ``POST /api/chat``.
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from config.settings import Settings
from src.adapters import get_llm_adapter, get_retrieval_client
from src.adapters.errors import ChatPipelineError
from src.adapters.llm_adapter import LLMAdapter
from src.adapters.retrieval_client import RetrievalClient
from src.cache.response_cache import ResponseCache
from src.conversation.context_store import ConversationContextStore
from src.intent_detection.classifier import IntentClassifier
from src.intent_detection.types import IntentClassificationResult
from src.pipeline.prompt_builder import PromptBuilder
from src.pipeline.query_preprocessor import QueryPreprocessor, sanitize_prompt
from src.query_analysis.analyzer import QueryAnalyzer, SettingsCaps
from src.query_analysis.options import resolve_generation_options
from src.utils.logging_config import PerformanceLogger
from src.utils.monitoring import PerformanceMonitor, StructuredLogger
from src.utils.response_cleaner import clean_html_artifacts

logger = logging.getLogger(__name__)

SOURCE_CACHED = "cached"
SOURCE_MODEL = "ai-model"


@dataclass(frozen=True)
class ChatResult:
    """Outcome of one chat request."""

    reply: str
    source: str
    model: str
    provider: str
    complexity: str
    response_time_ms: int
    cached: bool
    used_knowledge_base: bool
    intent: IntentClassificationResult
    session_id: str
    processed_prompt: str

    def to_response(self) -> dict[str, Any]:
        return {
            "reply": self.reply,
            "source": self.source,
            "model": self.model,
            "provider": self.provider,
            "complexity": self.complexity,
            "responseTime": self.response_time_ms,
            "cached": self.cached,
            "usedKnowledgeBase": self.used_knowledge_base,
            "intent": self.intent.to_public_dict(),
        }


class ChatPipeline:
    """Per-request orchestration of the chat flow."""

    def __init__(
        self,
        llm_adapter: LLMAdapter,
        retrieval_client: RetrievalClient,
        prompt_builder: PromptBuilder,
        classifier: IntentClassifier | None = None,
        analyzer: QueryAnalyzer | None = None,
        cache: ResponseCache | None = None,
        context_store: ConversationContextStore | None = None,
        preprocessor: QueryPreprocessor | None = None,
        monitor: PerformanceMonitor | None = None,
        structured_logger: StructuredLogger | None = None,
        caps: SettingsCaps | None = None,
    ):
        """Initialize the chat pipeline.

        Args:
            llm_adapter: Chat model adapter
            retrieval_client: Knowledge-base retrieval client
            prompt_builder: Builds system prompts and messages
            classifier: Intent classifier
            analyzer: Query complexity analyzer
            cache: Response cache
            context_store: Conversation memory
            preprocessor: Query rewrite rules
            monitor: Request metrics
            structured_logger: JSON decision logger
            caps: Caps applied to resolved settings
        """
        self.caps = caps or (analyzer.caps if analyzer else SettingsCaps())
        self.llm_adapter = llm_adapter
        self.retrieval_client = retrieval_client
        self.prompt_builder = prompt_builder
        self.classifier = classifier or IntentClassifier()
        self.analyzer = analyzer or QueryAnalyzer(self.caps)
        self.cache = cache or ResponseCache()
        self.context_store = context_store or ConversationContextStore()
        self.preprocessor = preprocessor or QueryPreprocessor()
        self.monitor = monitor or PerformanceMonitor()
        self.structured_logger = structured_logger or StructuredLogger()

        provider = self.llm_adapter.get_provider_info()
        logger.info(
            f"ChatPipeline initialized: provider={provider.provider}, "
            f"model={provider.model}, caps={self.caps}"
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatPipeline":
        """Build a pipeline with every component configured from settings."""
        caps = SettingsCaps.from_settings(settings)
        prompt_builder = PromptBuilder(settings.prompts_path)
        return cls(
            llm_adapter=get_llm_adapter(settings),
            retrieval_client=get_retrieval_client(
                settings, fallback_context=prompt_builder.fallback_context
            ),
            prompt_builder=prompt_builder,
            analyzer=QueryAnalyzer(caps),
            cache=ResponseCache(
                max_entries=settings.response_cache_max_entries,
                enabled=settings.response_cache_enabled,
            ),
            context_store=ConversationContextStore(
                max_turns=settings.conversation_max_turns,
                ttl_seconds=settings.conversation_ttl_seconds,
                max_sessions=settings.conversation_max_sessions,
            ),
            caps=caps,
        )

    async def process_chat(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        request_metadata: Mapping[str, Any] | None = None,
    ) -> ChatResult:
        """Process a chat prompt through the pipeline.

        Args:
            prompt: The user's message
            max_tokens: Optional request override for generated tokens
            temperature: Optional request override for sampling temperature
            request_metadata: Session correlation data
                (``session_id``, ``client_ip``, ``user_agent``)

        Returns:
            The chat result

        Raises:
            ValueError: If the prompt is empty after sanitization
            RetrievalError: If knowledge-base retrieval fails
            LanguageModelError: If the language model call fails
        """
        start_time = time.time()
        prompt = sanitize_prompt(prompt)
        if not prompt:
            raise ValueError("Prompt cannot be empty")

        try:
            with PerformanceLogger("chat_request") as perf:
                return await self._process(
                    prompt, max_tokens, temperature, request_metadata or {}, start_time, perf
                )
        except ChatPipelineError as e:
            self.monitor.record_error()
            self.structured_logger.log_error(
                {"code": e.code, "error": str(e), "details": e.details, "prompt": prompt}
            )
            raise
        except Exception as e:
            self.monitor.record_error()
            logger.error(f"Unexpected error processing chat: {e!s}", exc_info=True)
            raise

    async def _process(
        self,
        prompt: str,
        max_tokens: int | None,
        temperature: float | None,
        request_metadata: Mapping[str, Any],
        start_time: float,
        perf: PerformanceLogger,
    ) -> ChatResult:
        with perf.stage("analysis"):
            processed_prompt = self.preprocessor.preprocess(prompt)
            classification = self.classifier.classify_intent(processed_prompt)
            analysis = self.analyzer.analyze_complexity(processed_prompt, classification)

        logger.info(self.classifier.format_classification(classification))
        logger.info(self.analyzer.format_analysis(analysis))

        resolved = resolve_generation_options(
            override_max_tokens=max_tokens,
            override_temperature=temperature,
            heuristic=analysis.settings,
            caps=self.caps,
        )

        session_id = self.context_store.get_session_id(request_metadata)
        conversation_context = self.context_store.get_context(session_id)
        if analysis.is_follow_up and conversation_context is not None:
            processed_prompt = self.context_store.resolve_pronouns(
                processed_prompt, conversation_context
            )

        complexity = analysis.complexity.value
        provider = self.llm_adapter.get_provider_info()
        decision = {
            "prompt": processed_prompt,
            "session_id": session_id,
            "intent": classification.to_public_dict(),
            "complexity": complexity,
            "rag_multiplier": analysis.rag_multiplier,
            "settings": {
                "maxTokens": resolved.generation.max_tokens,
                "temperature": resolved.generation.temperature,
                "numCtx": resolved.generation.num_ctx,
                "ragSections": resolved.rag_sections,
                "ragMaxTokens": resolved.rag_max_tokens,
            },
        }

        cached_reply = self.cache.get_cached_ai_response(processed_prompt)
        if cached_reply is not None:
            response_time_ms = int((time.time() - start_time) * 1000)
            logger.info(f"⚡ CACHED ({response_time_ms}ms)")
            self.structured_logger.log_chat_decision({**decision, "cached": True})
            self.monitor.record_request(response_time_ms, complexity, cached=True)
            return ChatResult(
                reply=cached_reply,
                source=SOURCE_CACHED,
                model=provider.model,
                provider=provider.provider,
                complexity=complexity,
                response_time_ms=response_time_ms,
                cached=True,
                used_knowledge_base=False,
                intent=classification,
                session_id=session_id,
                processed_prompt=processed_prompt,
            )

        self.structured_logger.log_chat_decision({**decision, "cached": False})

        used_knowledge_base = classification.uses_knowledge_base
        if used_knowledge_base:
            with perf.stage("retrieval"):
                relevant_context = await self.retrieval_client.get_context_for_topic(
                    processed_prompt,
                    max_tokens=resolved.rag_max_tokens,
                    max_sections=resolved.rag_sections,
                )
            system_prompt = self.prompt_builder.build_knowledge_base_prompt(
                conversation_context, classification, relevant_context
            )
        else:
            logger.info("🌍 Using general knowledge (no retrieval)")
            system_prompt = self.classifier.get_system_prompt(classification)

        messages = self.prompt_builder.build_messages(system_prompt, processed_prompt)
        with perf.stage("generation"):
            raw_reply = await self.llm_adapter.chat(messages, resolved.generation)
        reply = clean_html_artifacts(raw_reply)

        self.cache.cache_ai_response(processed_prompt, reply, complexity)
        self.context_store.store_conversation(
            session_id,
            processed_prompt,
            reply,
            {"detected_topics": analysis.detected_topics, "complexity": complexity},
        )

        response_time_ms = int((time.time() - start_time) * 1000)
        self.monitor.record_request(
            response_time_ms, complexity, cached=False, used_knowledge_base=used_knowledge_base
        )
        logger.info(f"⚡ Response: {response_time_ms / 1000:.2f}s")

        return ChatResult(
            reply=reply,
            source=SOURCE_MODEL,
            model=provider.model,
            provider=provider.provider,
            complexity=complexity,
            response_time_ms=response_time_ms,
            cached=False,
            used_knowledge_base=used_knowledge_base,
            intent=classification,
            session_id=session_id,
            processed_prompt=processed_prompt,
        )

    def clear_cache(self) -> int:
        """Invalidate every cached reply, e.g. after a knowledge-base refresh."""
        return self.cache.clear_ai_response_cache()

    def clear_conversation(self, session_id: str) -> bool:
        return self.context_store.clear_conversation(session_id)

    def get_statistics(self) -> dict[str, Any]:
        """Get pipeline statistics.

        Returns:
            Dictionary with request metrics, cache and conversation stats
        """
        provider = self.llm_adapter.get_provider_info()
        return {
            "requests": self.monitor.get_metrics(),
            "cache": self.cache.get_stats(),
            "conversations": self.context_store.get_stats(),
            "provider": {"provider": provider.provider, "model": provider.model},
        }

    async def close(self) -> None:
        await self.llm_adapter.close()
        await self.retrieval_client.close()
