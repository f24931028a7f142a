"""Two-layer intent classification for campus assistant queries.

Layer 1 decides the conversational register of a message (greeting,
follow-up, information query, ...). Layer 2 decides whether the answer must be
grounded in the curated DOrSU knowledge base or can come from the model's
general knowledge.
"""

import logging

from . import keywords as kw
from .types import (
    ConversationalIntent,
    DataSource,
    IntentClassificationResult,
    IntentScores,
)

logger = logging.getLogger(__name__)

_CONVERSATIONAL_ICONS = {
    ConversationalIntent.GREETING: "👋",
    ConversationalIntent.FAREWELL: "👋",
    ConversationalIntent.GRATITUDE: "🙏",
    ConversationalIntent.EMOTION_EXPRESSION: "💭",
    ConversationalIntent.TASK_REQUEST: "✅",
    ConversationalIntent.INFORMATION_QUERY: "❓",
    ConversationalIntent.CLARIFICATION_REQUEST: "🤔",
    ConversationalIntent.FOLLOW_UP: "🔄",
    ConversationalIntent.SMALL_TALK: "💬",
}

_KNOWLEDGE_BASE_PREAMBLE = (
    "You are a DOrSU Assistant. Answer using ONLY the DOrSU knowledge base provided. "
    "If the information is not in the knowledge base, say "
    "\"I don't have that specific information about DOrSU.\""
)
_GENERAL_PREAMBLE = (
    "You are a helpful AI assistant. Answer this general knowledge question using "
    "your training data. Be accurate, concise, and educational. "
    "If you're unsure, acknowledge it."
)


class IntentClassifier:
    """Keyword and pattern based intent classifier.

    The classifier holds no per-request state; one instance can serve every
    request concurrently.
    """

    def classify_intent(self, query: str) -> IntentClassificationResult:
        """Classify both layers for a raw query.

        Never raises for string input; unmatched input degrades to
        ``information_query`` / ``general_knowledge``.
        """
        lower_query = self._normalize(query)

        intent, intent_confidence, hint = self.detect_conversational_intent(lower_query)
        scores = self._score_sources(lower_query)

        if scores.institution > scores.general:
            source = DataSource.KNOWLEDGE_BASE
            total = scores.institution + scores.general + 1
            source_confidence = min(100, round(scores.institution / total * 100))
            category = kw.INSTITUTION_CATEGORY
        elif scores.general > 0:
            source = DataSource.GENERAL_KNOWLEDGE
            total = scores.institution + scores.general + 1
            source_confidence = min(100, round(scores.general / total * 100))
            category = (
                scores.general_categories[0]
                if scores.general_categories
                else kw.DEFAULT_CATEGORY
            )
        else:
            source = DataSource.GENERAL_KNOWLEDGE
            source_confidence = 0
            category = kw.DEFAULT_CATEGORY
            scores.reasoning.append("No clear indicators - using general knowledge")

        return IntentClassificationResult(
            conversational_intent=intent,
            conversational_confidence=intent_confidence,
            response_hint=hint,
            source=source,
            source_confidence=source_confidence,
            category=category,
            institution_score=scores.institution,
            general_score=scores.general,
            detected_entities=tuple(scores.entities),
            detected_general_categories=tuple(scores.general_categories),
            reasoning=tuple(scores.reasoning),
            query=(query or "")[:100],
        )

    def detect_conversational_intent(
        self, lower_query: str
    ) -> tuple[ConversationalIntent, int, str]:
        """Pick the conversational intent with the most matching patterns.

        Rules are scanned in priority order and only a strictly higher
        confidence replaces the current best, so earlier rules win ties.
        """
        best = None
        for rule in kw.CONVERSATIONAL_RULES:
            match_count = sum(1 for p in rule.patterns if p.search(lower_query))
            if not match_count:
                continue
            confidence = min(100, match_count * kw.CONFIDENCE_PER_PATTERN)
            if best is None or confidence > best[1]:
                best = (rule.intent, confidence, rule.response_hint)

        if best is None:
            return (
                ConversationalIntent.INFORMATION_QUERY,
                kw.DEFAULT_CONVERSATIONAL_CONFIDENCE,
                kw.DEFAULT_RESPONSE_HINT,
            )
        return best

    def _score_sources(self, lower_query: str) -> IntentScores:
        scores = IntentScores()
        if not lower_query:
            return scores

        if any(p.search(lower_query) for p in kw.INSTITUTION_MENTIONS):
            scores.institution += kw.INSTITUTION_MENTION_WEIGHT
            scores.reasoning.append("Direct DOrSU mention")

        for category, matchers in kw.COMPILED_INSTITUTION_ENTITIES.items():
            found = tuple(term for term, p in matchers if p.search(lower_query))
            if found:
                scores.institution += len(found) * kw.INSTITUTION_ENTITY_WEIGHT
                scores.entities.append((category, found))
                scores.reasoning.append(f"DOrSU {category}: {', '.join(found)}")

        question_hits = sum(
            1 for p in kw.INSTITUTION_QUESTION_PATTERNS if p.search(lower_query)
        )
        if question_hits:
            scores.institution += question_hits * kw.INSTITUTION_QUESTION_WEIGHT
            scores.reasoning.append("DOrSU question pattern matched")

        topic_hits = sum(1 for p in kw.INSTITUTION_TOPIC_TERMS if p.search(lower_query))
        if topic_hits:
            scores.institution += topic_hits * kw.INSTITUTION_TOPIC_WEIGHT
            scores.reasoning.append("Institutional topic mentioned")

        for category, patterns in kw.GENERAL_KNOWLEDGE_PATTERNS.items():
            matched = sum(1 for p in patterns if p.search(lower_query))
            if matched:
                scores.general += matched * kw.GENERAL_PATTERN_WEIGHT
                scores.general_categories.append(category)
                scores.reasoning.append(f"General {category} question")

        if scores.institution == 0:
            if kw.GENERIC_UNIVERSITY_CLUE.search(lower_query):
                scores.general += kw.GENERIC_UNIVERSITY_WEIGHT
                scores.reasoning.append("General university question")
            if kw.GENERIC_WHAT_IS_CLUE.search(lower_query):
                scores.general += kw.GENERIC_WHAT_IS_WEIGHT
                scores.reasoning.append('General "what is" question')

        return scores

    def get_system_prompt(self, classification: IntentClassificationResult) -> str:
        """Build the instruction preamble for the classified source and intent."""
        if classification.uses_knowledge_base:
            base_prompt = _KNOWLEDGE_BASE_PREAMBLE
        else:
            base_prompt = _GENERAL_PREAMBLE

        intent_guidance = (
            f"\n\nUSER INTENT: {classification.conversational_intent.value}\n"
            f"→ {classification.response_hint}"
        )
        return base_prompt + intent_guidance

    def format_classification(self, classification: IntentClassificationResult) -> str:
        """Format classification for logging."""
        if classification.uses_knowledge_base:
            icon, source_text = "🏫", "DOrSU Knowledge Base"
        else:
            icon, source_text = "🌍", "General Knowledge"
        intent_icon = self.get_conversational_icon(classification.conversational_intent)

        return (
            f"{intent_icon} {classification.conversational_intent.value.upper()} "
            f"({classification.conversational_confidence}%) | "
            f"{icon} {classification.category.upper()} → {source_text} "
            f"({classification.source_confidence}% confidence)"
        )

    @staticmethod
    def get_conversational_icon(intent: ConversationalIntent) -> str:
        return _CONVERSATIONAL_ICONS.get(intent, "💬")

    @staticmethod
    def _normalize(query: str) -> str:
        if not isinstance(query, str):
            return ""
        return query.lower().strip()
