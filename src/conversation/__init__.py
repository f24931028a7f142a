"""Conversation memory and follow-up resolution."""

from .context_store import (
    ConversationContext,
    ConversationContextStore,
    ConversationEntities,
    ConversationTurn,
)

__all__ = [
    "ConversationContext",
    "ConversationContextStore",
    "ConversationEntities",
    "ConversationTurn",
]
