"""Type definitions for query complexity analysis."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.intent_detection.types import IntentClassificationResult


class Complexity(Enum):
    """Retrieval tier derived from the multiplier."""

    STANDARD = "standard"
    MODERATE_RETRIEVAL = "moderate-retrieval"
    HIGH_RETRIEVAL = "high-retrieval"
    MAXIMUM_RETRIEVAL = "maximum-retrieval"


class IntentMatch(Enum):
    """Phrasing intents detected in a query."""

    LISTING = "listing"
    COUNTING = "counting"
    MULTIPLE = "multiple"
    COMPREHENSIVE = "comprehensive"
    FOLLOW_UP = "followUp"
    MULTI_PART = "multiPart"


@dataclass(frozen=True)
class TopicMatch:
    """A topic category and the keywords that triggered it."""

    category: str
    keywords: tuple[str, ...]


@dataclass(frozen=True)
class RetrievalSettings:
    """Retrieval and generation parameters scaled from the multiplier."""

    max_tokens: int
    num_ctx: int
    rag_sections: int
    rag_max_tokens: int
    temperature: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "maxTokens": self.max_tokens,
            "numCtx": self.num_ctx,
            "ragSections": self.rag_sections,
            "ragMaxTokens": self.rag_max_tokens,
            "temperature": self.temperature,
            "description": self.description,
        }


@dataclass(frozen=True)
class QueryAnalysisResult:
    """Everything the pipeline needs to size retrieval for one query."""

    complexity: Complexity
    confidence: int
    detected_topics: tuple[TopicMatch, ...]
    detected_intents: tuple[IntentMatch, ...]
    found_plurals: tuple[str, ...]
    rag_multiplier: float
    settings: RetrievalSettings
    is_multi_part: bool
    is_follow_up: bool
    intent_classification: IntentClassificationResult | None
