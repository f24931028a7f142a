"""In-process cache of generated replies.

Keys are a normalized form of the prompt actually sent to the model, so the
same resolved question always maps to the same entry. A hit returns exactly
the text that was stored.
"""

import logging
import threading
import time
import unicodedata
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


def normalize_cache_key(prompt: str) -> str:
    """NFKC, lowercase, trim and collapse internal whitespace."""
    text = unicodedata.normalize("NFKC", prompt or "")
    return " ".join(text.lower().split())


@dataclass(frozen=True)
class CacheEntry:
    reply: str
    complexity: str
    created_at: float


class ResponseCache:
    """Bounded FIFO cache with explicit, atomic bulk invalidation.

    Constructed once at service start. No lock is held across I/O; every
    critical section is a single dictionary operation.
    """

    def __init__(self, max_entries: int = 1000, enabled: bool = True):
        """Initialize the response cache.

        Args:
            max_entries: Entries kept before the oldest is evicted.
            enabled: When False every lookup misses and writes are ignored.
        """
        self.max_entries = max_entries
        self.enabled = enabled
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0, "clears": 0}

        logger.info(
            f"ResponseCache initialized: enabled={enabled}, max_entries={max_entries}"
        )

    def get_cached_ai_response(self, prompt: str) -> str | None:
        """Return the cached reply for a prompt, or None."""
        if not self.enabled:
            return None
        key = normalize_cache_key(prompt)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
        logger.debug(f"Cache hit for prompt: {key[:50]}...")
        return entry.reply

    def get_entry(self, prompt: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(normalize_cache_key(prompt))

    def cache_ai_response(self, prompt: str, reply: str, complexity: str) -> None:
        """Store a reply. Concurrent writes to the same key: last write wins."""
        if not self.enabled:
            return
        key = normalize_cache_key(prompt)
        entry = CacheEntry(reply=reply, complexity=complexity, created_at=time.time())
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self._stats["evictions"] += 1
        logger.debug(f"💾 Cached reply ({complexity}) for prompt: {key[:50]}...")

    def clear_ai_response_cache(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        with self._lock:
            removed = len(self._entries)
            # Swap rather than clear in place so a reader holding the old map
            # still sees a complete structure.
            self._entries = OrderedDict()
            self._stats["clears"] += 1
        logger.info(f"🗑️ AI response cache cleared ({removed} entries)")
        return removed

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            stats: dict[str, Any] = dict(self._stats)
            stats["size"] = len(self._entries)
        lookups = stats["hits"] + stats["misses"]
        stats["hit_rate"] = stats["hits"] / lookups if lookups else 0.0
        stats["enabled"] = self.enabled
        return stats
