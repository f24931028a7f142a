"""Conversation memory for follow-up questions.

Keeps the last few turns per session so that a follow-up such as
"What about him?" can be rewritten against the previous exchange. Pronoun
resolution is a best-effort heuristic: when no single antecedent is clear the
prompt is returned untouched.
"""

import logging
import re
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from src.query_analysis.types import TopicMatch

logger = logging.getLogger(__name__)

_PERSON_NAME = r"([A-Z][a-z]+(?:\s+[A-Z]\.?)?\s+[A-Z][a-z]+)"
_PEOPLE_PATTERNS = tuple(
    re.compile(prefix + r"\s+" + _PERSON_NAME)
    for prefix in (r"\bDr\.", r"\bProf\.", r"\bPresident", r"\bDean", r"\bMs\.", r"\bMr\.", r"\bMrs\.")
)
_OFFICE_PATTERN = re.compile(
    r"\b(OSPAT|OSA|OSCD|FASG|PESO|IRO|HSU|CGAD|IP-TBM|GCTC|OHWS)\b", re.IGNORECASE
)
_YEAR_PATTERN = re.compile(r"\b(20[2-3][0-9])\b")
_EXAM_PATTERN = re.compile(
    r"\b(SUAST|State University Aptitude and Scholarship Test|entrance exam|admission test)\b",
    re.IGNORECASE,
)
_STATISTICS_TERMS = ("statistics", "stats", "passing rate", "applicants", "enrolled")
_FACULTY_PATTERN = re.compile(r"\b(FACET|FTED|FALS|FHUSOCOM|FBM|FCJE|FNAHS)\b")
_PROGRAM_PATTERN = re.compile(r"\b(B[A-Z]{2,4})\b")
_CAMPUS_PATTERN = re.compile(
    r"\b(Main|Banaybanay|Cateel|Baganga|Tarragona|San Isidro) Campus\b", re.IGNORECASE
)

_YEAR_FOLLOW_UP = re.compile(
    r"\b(how|what)\s+about\s+(in\s+)?(\d{4}(\s+(and|or)\s+\d{4})?)", re.IGNORECASE
)
_YEAR_QUERY = re.compile(r"\b(in|for)\s+(\d{4}(\s+(and|or)\s+\d{4})?)", re.IGNORECASE)
_GENERIC_FOLLOW_UPS = (
    re.compile(r"\b(how|what)\s+about\s+(the\s+)?(other|others)\b", re.IGNORECASE),
    re.compile(r"\b(and|or)\s+the\s+(other|others)\b", re.IGNORECASE),
)
_OFFICE_FOLLOW_UP = re.compile(
    r"\b(what|how)\s+about\s+(the\s+)?(head|director|services)\b", re.IGNORECASE
)
_OFFICE_FOLLOW_UP_PREFIX = re.compile(r"\b(what|how)\s+about\s+(the\s+)?", re.IGNORECASE)

# Possessives first so "his achievements" is not reduced to "<name> achievements".
_POSSESSIVE_PRONOUNS = (
    re.compile(
        r"\b(his|her)\s+(achievements?|programs?|courses?|background|details?|info|office)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(niya|kanyang|iya|iyang)\s+(?:mga\s+)?(tagumpay|kalampusan|programa|kurso|background)\b",
        re.IGNORECASE,
    ),
)
_POSSESSIVE_STANDALONE = re.compile(r"\b(his|hers)\b", re.IGNORECASE)
# Any other "her <word>" reads as possessive unless the word starts a new clause.
_POSSESSIVE_HER = re.compile(
    r"\bher\s+(?!(?:and|or|but|in|on|at|to|for|from|with|about|now|too|again|please)\b)(?=\w)",
    re.IGNORECASE,
)
_PERSONAL_PRONOUNS = re.compile(r"\b(he|she|him|her|siya)\b", re.IGNORECASE)

_SESSION_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9]")
MAX_SESSION_ID_LENGTH = 100


@dataclass
class ConversationEntities:
    """Entities mentioned in a turn, most recent first when merged."""

    people: list[str] = field(default_factory=list)
    offices: list[str] = field(default_factory=list)
    years: list[str] = field(default_factory=list)
    exams: list[str] = field(default_factory=list)
    statistics: list[str] = field(default_factory=list)
    faculties: list[str] = field(default_factory=list)
    programs: list[str] = field(default_factory=list)
    campuses: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConversationTurn:
    prompt: str
    reply: str
    detected_topics: tuple[TopicMatch, ...]
    complexity: str
    entities: ConversationEntities
    timestamp: float


@dataclass(frozen=True)
class ConversationContext:
    """Snapshot of one session's recent history."""

    session_id: str
    recent_turns: tuple[ConversationTurn, ...]
    last_accessed: float

    @property
    def last_turn(self) -> ConversationTurn:
        return self.recent_turns[-1]

    @property
    def recent_entities(self) -> ConversationEntities:
        merged = ConversationEntities()
        for turn in reversed(self.recent_turns):
            for f in fields(ConversationEntities):
                getattr(merged, f.name).extend(getattr(turn.entities, f.name))
        for f in fields(ConversationEntities):
            setattr(merged, f.name, _dedupe(getattr(merged, f.name)))
        return merged


@dataclass
class _Session:
    turns: list[ConversationTurn]
    last_accessed: float


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


class ConversationContextStore:
    """In-process, bounded store of recent turns keyed by session id."""

    def __init__(
        self,
        max_turns: int = 5,
        ttl_seconds: float = 600.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the store.

        Args:
            max_turns: Turns kept per session.
            ttl_seconds: Inactivity period after which a session is dropped.
            max_sessions: Sessions kept before the least recently used is evicted.
            clock: Time source, injectable for tests.
        """
        self.max_turns = max_turns
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, _Session] = OrderedDict()
        self._lock = threading.Lock()

        logger.info(
            f"ConversationContextStore initialized: max_turns={max_turns}, "
            f"ttl={ttl_seconds}s, max_sessions={max_sessions}"
        )

    @staticmethod
    def get_session_id(request_metadata: Mapping[str, Any]) -> str:
        """Derive a stable session id from request correlation data.

        An explicit ``session_id`` wins; otherwise client IP and user agent
        are combined.
        """
        explicit = request_metadata.get("session_id")
        if explicit:
            raw = str(explicit)
        else:
            ip = request_metadata.get("client_ip") or "unknown"
            user_agent = request_metadata.get("user_agent") or "unknown"
            raw = f"{ip}_{user_agent}"
        return _SESSION_ID_UNSAFE.sub("_", raw)[:MAX_SESSION_ID_LENGTH]

    def store_conversation(
        self,
        session_id: str,
        prompt: str,
        reply: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Append a turn, keeping only the most recent ``max_turns``."""
        metadata = metadata or {}
        detected_topics = tuple(metadata.get("detected_topics") or ())
        turn = ConversationTurn(
            prompt=prompt,
            reply=reply,
            detected_topics=detected_topics,
            complexity=str(metadata.get("complexity", "standard")),
            entities=self.extract_entities(prompt, reply, detected_topics),
            timestamp=self._clock(),
        )

        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            session = self._sessions.pop(session_id, None) or _Session([], now)
            session.turns.append(turn)
            del session.turns[: -self.max_turns]
            session.last_accessed = now
            self._sessions[session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.debug(f"Evicted conversation session {evicted[:20]}...")

        logger.info(f"💬 Stored conversation turn for session: {session_id[:20]}...")

    def get_context(self, session_id: str) -> ConversationContext | None:
        """Return recent history for a session, or None if there is none."""
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            session = self._sessions.get(session_id)
            if session is None or not session.turns:
                return None
            session.last_accessed = now
            self._sessions.move_to_end(session_id)
            return ConversationContext(
                session_id=session_id,
                recent_turns=tuple(session.turns),
                last_accessed=now,
            )

    def clear_conversation(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"🗑️ Cleared conversation for session: {session_id[:20]}...")
        return removed

    def get_stats(self) -> dict[str, int]:
        with self._lock:
            self._purge_expired(self._clock())
            return {
                "active_conversations": len(self._sessions),
                "total_turns": sum(len(s.turns) for s in self._sessions.values()),
            }

    def resolve_pronouns(self, prompt: str, context: ConversationContext | None) -> str:
        """Rewrite referring terms using the previous exchange.

        Returns the prompt unchanged when there is no context or no single,
        unambiguous antecedent.
        """
        if not prompt or context is None or not context.recent_turns:
            return prompt

        resolved = prompt
        entities = context.recent_entities
        is_follow_up = bool(
            _YEAR_FOLLOW_UP.search(prompt)
            or _YEAR_QUERY.search(prompt)
            or any(p.search(prompt) for p in _GENERIC_FOLLOW_UPS)
        )

        if is_follow_up and entities.exams and entities.statistics:
            exam = entities.exams[0]
            if _YEAR_FOLLOW_UP.search(resolved):
                resolved = _YEAR_FOLLOW_UP.sub(
                    lambda m: f"{exam} statistics for {m.group(3)}", resolved
                )
            elif _YEAR_QUERY.search(resolved) and len(resolved) < 30:
                resolved = f"{exam} statistics {resolved}"

        if is_follow_up or _OFFICE_FOLLOW_UP.search(resolved):
            if entities.offices and _OFFICE_FOLLOW_UP.search(resolved):
                office = entities.offices[0]
                resolved = _OFFICE_FOLLOW_UP_PREFIX.sub(
                    f"what about the {office} ", resolved, count=1
                )

        person = self._find_person_antecedent(context)
        if person:
            for pattern in _POSSESSIVE_PRONOUNS:
                resolved = pattern.sub(lambda m: f"{person}'s {m.group(2)}", resolved)
            resolved = _POSSESSIVE_STANDALONE.sub(f"{person}'s", resolved)
            resolved = _POSSESSIVE_HER.sub(f"{person}'s ", resolved)
            resolved = _PERSONAL_PRONOUNS.sub(person, resolved)

        if resolved != prompt:
            logger.info(f"🔄 Resolved follow-up: '{prompt[:50]}' → '{resolved[:80]}'")
        return resolved

    def _purge_expired(self, now: float) -> None:
        """Drop sessions idle for longer than the TTL. Caller holds the lock."""
        expired = [
            sid
            for sid, session in self._sessions.items()
            if now - session.last_accessed > self.ttl_seconds
        ]
        for sid in expired:
            del self._sessions[sid]

    @staticmethod
    def _find_person_antecedent(context: ConversationContext) -> str | None:
        """The one person named in the latest turn that names anyone."""
        for turn in reversed(context.recent_turns):
            people = _dedupe(turn.entities.people)
            if people:
                return people[0] if len(people) == 1 else None
        return None

    @staticmethod
    def extract_entities(
        prompt: str, reply: str, detected_topics: tuple[TopicMatch, ...] = ()
    ) -> ConversationEntities:
        """Pull people, offices, years and other referents out of a turn."""
        entities = ConversationEntities()
        both = (prompt, reply)

        for text in both:
            for pattern in _PEOPLE_PATTERNS:
                entities.people.extend(m.group(1) for m in pattern.finditer(text))
            entities.offices.extend(
                m.group(1).upper() for m in _OFFICE_PATTERN.finditer(text)
            )
            entities.years.extend(m.group(1) for m in _YEAR_PATTERN.finditer(text))
            for m in _EXAM_PATTERN.finditer(text):
                name = m.group(1)
                entities.exams.append("SUAST" if "suast" in name.lower() else name)

        lowered = " ".join(both).lower()
        if any(term in lowered for term in _STATISTICS_TERMS):
            entities.statistics.append("statistics")

        entities.faculties.extend(m.group(1) for m in _FACULTY_PATTERN.finditer(reply))
        entities.programs.extend(m.group(1) for m in _PROGRAM_PATTERN.finditer(reply))
        entities.campuses.extend(m.group(1) for m in _CAMPUS_PATTERN.finditer(reply))
        entities.topics.extend(t.category for t in detected_topics)

        for f in fields(ConversationEntities):
            setattr(entities, f.name, _dedupe(getattr(entities, f.name)))
        return entities
