"""Intent Detection Module for the campus assistant.

This module classifies incoming messages by conversational register and by
the data source that should answer them.
"""

from .classifier import IntentClassifier
from .types import ConversationalIntent, DataSource, IntentClassificationResult

__all__ = [
    "ConversationalIntent",
    "DataSource",
    "IntentClassificationResult",
    "IntentClassifier",
]
