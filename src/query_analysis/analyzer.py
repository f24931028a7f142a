"""Query analyzer that sizes retrieval for each incoming question.

Topics, phrasing intents and plural nouns each push a multiplier up from 1.0.
The clamped multiplier then picks a complexity tier and scales the retrieval
and generation settings, which are always capped.
"""

import logging
import math
from dataclasses import dataclass

from config.settings import (
    HARD_MAX_TOKENS_CAP,
    HARD_NUM_CTX_CAP,
    HARD_RAG_MAX_TOKENS_CAP,
    HARD_RAG_SECTIONS_CAP,
)
from src.intent_detection.types import IntentClassificationResult

from . import rules
from .types import (
    Complexity,
    IntentMatch,
    QueryAnalysisResult,
    RetrievalSettings,
    TopicMatch,
)

logger = logging.getLogger(__name__)

_COMPLEXITY_ICONS = {
    Complexity.MAXIMUM_RETRIEVAL: "🎯",
    Complexity.HIGH_RETRIEVAL: "📈",
    Complexity.MODERATE_RETRIEVAL: "📊",
    Complexity.STANDARD: "📊",
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for the positive values used here."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SettingsCaps:
    """Upper bounds for derived settings.

    Values above the hard ceilings are silently lowered to them.
    """

    max_tokens: int = HARD_MAX_TOKENS_CAP
    num_ctx: int = HARD_NUM_CTX_CAP
    rag_sections: int = HARD_RAG_SECTIONS_CAP
    rag_max_tokens: int = HARD_RAG_MAX_TOKENS_CAP

    def __post_init__(self):
        object.__setattr__(self, "max_tokens", min(self.max_tokens, HARD_MAX_TOKENS_CAP))
        object.__setattr__(self, "num_ctx", min(self.num_ctx, HARD_NUM_CTX_CAP))
        object.__setattr__(
            self, "rag_sections", min(self.rag_sections, HARD_RAG_SECTIONS_CAP)
        )
        object.__setattr__(
            self, "rag_max_tokens", min(self.rag_max_tokens, HARD_RAG_MAX_TOKENS_CAP)
        )

    @classmethod
    def from_settings(cls, settings) -> "SettingsCaps":
        return cls(
            max_tokens=settings.max_tokens_cap,
            num_ctx=settings.num_ctx_cap,
            rag_sections=settings.rag_sections_cap,
            rag_max_tokens=settings.rag_max_tokens_cap,
        )


class QueryAnalyzer:
    """Deterministic, side-effect free complexity analysis."""

    def __init__(self, caps: SettingsCaps | None = None):
        """Initialize the analyzer.

        Args:
            caps: Optional tighter caps for the derived settings.
        """
        self.caps = caps or SettingsCaps()

    def analyze_complexity(
        self,
        query: str,
        intent_classification: IntentClassificationResult | None = None,
    ) -> QueryAnalysisResult:
        """Analyze a query to determine how much context to retrieve."""
        lower_query = query.lower().strip() if isinstance(query, str) else ""
        multiplier = rules.MIN_MULTIPLIER

        detected_topics = []
        for rule in rules.TOPIC_RULES:
            matched = tuple(k for k in rule.keywords if k in lower_query)
            if matched:
                detected_topics.append(TopicMatch(rule.category, matched))
                multiplier += rule.weight

        detected_intents = []
        for rule in rules.PHRASING_RULES:
            if rule.pattern.search(lower_query):
                detected_intents.append(rule.tag)
                multiplier += rule.weight

        found_plurals = tuple(p for p in rules.PLURAL_KEYWORDS if p in lower_query)
        if found_plurals:
            multiplier += len(found_plurals) * rules.PLURAL_WEIGHT
            if any(lower_query.find(p) < rules.EARLY_PLURAL_OFFSET for p in found_plurals):
                multiplier += rules.EARLY_PLURAL_BOOST

        multiplier = self.clamp_multiplier(multiplier)
        complexity, _ = self._tier_for(multiplier)

        return QueryAnalysisResult(
            complexity=complexity,
            confidence=max(0, min(100, round_half_up(multiplier * 25))),
            detected_topics=tuple(detected_topics),
            detected_intents=tuple(detected_intents),
            found_plurals=found_plurals,
            rag_multiplier=multiplier,
            settings=self.get_optimal_settings(multiplier),
            is_multi_part=IntentMatch.MULTI_PART in detected_intents,
            is_follow_up=IntentMatch.FOLLOW_UP in detected_intents,
            intent_classification=intent_classification,
        )

    def get_optimal_settings(self, rag_multiplier: float) -> RetrievalSettings:
        """Scale the base settings by the multiplier, respecting the caps."""
        multiplier = self.clamp_multiplier(rag_multiplier)
        _, description = self._tier_for(multiplier)

        return RetrievalSettings(
            max_tokens=min(
                self.caps.max_tokens, round_half_up(rules.BASE_MAX_TOKENS * multiplier)
            ),
            num_ctx=min(
                self.caps.num_ctx,
                round_half_up(rules.BASE_NUM_CTX * math.sqrt(multiplier)),
            ),
            rag_sections=min(
                self.caps.rag_sections,
                round_half_up(rules.BASE_RAG_SECTIONS * multiplier),
            ),
            rag_max_tokens=min(
                self.caps.rag_max_tokens,
                round_half_up(rules.BASE_RAG_MAX_TOKENS * multiplier),
            ),
            temperature=rules.BASE_TEMPERATURE,
            description=description,
        )

    def format_analysis(self, analysis: QueryAnalysisResult) -> str:
        """Format analysis for logging."""
        icon = _COMPLEXITY_ICONS[analysis.complexity]
        if analysis.detected_topics:
            topics_text = "Topics: " + ", ".join(t.category for t in analysis.detected_topics)
        else:
            topics_text = "No specific topics"
        if analysis.detected_intents:
            intents_text = "Intents: " + ", ".join(i.value for i in analysis.detected_intents)
        else:
            intents_text = "Basic query"

        return (
            f"{icon} {analysis.complexity.value.upper()} "
            f"({analysis.rag_multiplier:.2f}x RAG) - "
            f"{analysis.settings.rag_sections} sections, "
            f"{analysis.settings.rag_max_tokens} tokens - "
            f"{topics_text} | {intents_text}"
        )

    @staticmethod
    def clamp_multiplier(value: float) -> float:
        if math.isnan(value):
            return rules.MIN_MULTIPLIER
        return max(rules.MIN_MULTIPLIER, min(rules.MAX_MULTIPLIER, value))

    @staticmethod
    def _tier_for(multiplier: float) -> tuple[Complexity, str]:
        for threshold, complexity, description in rules.COMPLEXITY_TIERS:
            if multiplier >= threshold:
                return complexity, description
        return Complexity.STANDARD, rules.STANDARD_DESCRIPTION
