"""Type definitions for intent detection module."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConversationalIntent(Enum):
    """How the user is talking to the assistant."""

    GREETING = "greeting"
    FAREWELL = "farewell"
    GRATITUDE = "gratitude"
    EMOTION_EXPRESSION = "emotion_expression"
    TASK_REQUEST = "task_request"
    INFORMATION_QUERY = "information_query"
    CLARIFICATION_REQUEST = "clarification_request"
    FOLLOW_UP = "follow_up"
    SMALL_TALK = "small_talk"


class DataSource(Enum):
    """Where the answer should come from."""

    KNOWLEDGE_BASE = "knowledge_base"
    GENERAL_KNOWLEDGE = "general_knowledge"


@dataclass(frozen=True)
class ConversationalRule:
    """Pattern group for one conversational intent."""

    intent: ConversationalIntent
    patterns: tuple[re.Pattern, ...]
    response_hint: str


@dataclass(frozen=True)
class IntentClassificationResult:
    """Two-layer classification of a single query.

    Produced fresh for every request and never mutated afterwards.
    """

    conversational_intent: ConversationalIntent
    conversational_confidence: int
    response_hint: str
    source: DataSource
    source_confidence: int
    category: str
    institution_score: int = 0
    general_score: int = 0
    detected_entities: tuple[tuple[str, tuple[str, ...]], ...] = ()
    detected_general_categories: tuple[str, ...] = ()
    reasoning: tuple[str, ...] = ()
    query: str = ""

    def __post_init__(self):
        """Validate confidence scores."""
        for name in ("conversational_confidence", "source_confidence"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")

    @property
    def uses_knowledge_base(self) -> bool:
        return self.source is DataSource.KNOWLEDGE_BASE

    def to_public_dict(self) -> dict[str, Any]:
        """Projection exposed to API clients."""
        return {
            "conversational": self.conversational_intent.value,
            "confidence": self.conversational_confidence,
            "dataSource": self.source.value,
            "category": self.category,
        }


@dataclass
class IntentScores:
    """Running totals while scoring the data source."""

    institution: int = 0
    general: int = 0
    entities: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    general_categories: list[str] = field(default_factory=list)
    reasoning: list[str] = field(default_factory=list)
