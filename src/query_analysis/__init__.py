"""Query complexity analysis and retrieval settings derivation."""

from .analyzer import QueryAnalyzer, SettingsCaps
from .options import GenerationOptions, ResolvedSettings, resolve_generation_options
from .types import (
    Complexity,
    IntentMatch,
    QueryAnalysisResult,
    RetrievalSettings,
    TopicMatch,
)

__all__ = [
    "Complexity",
    "GenerationOptions",
    "IntentMatch",
    "QueryAnalysisResult",
    "QueryAnalyzer",
    "ResolvedSettings",
    "RetrievalSettings",
    "SettingsCaps",
    "TopicMatch",
    "resolve_generation_options",
]
