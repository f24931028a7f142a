"""Unit tests for conversation memory and follow-up resolution."""

import pytest

from src.conversation.context_store import ConversationContextStore
from src.query_analysis.types import TopicMatch


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return ConversationContextStore(max_turns=3, ttl_seconds=60, max_sessions=2, clock=clock)


class TestSessionId:
    def test_explicit_session_id_wins(self):
        session_id = ConversationContextStore.get_session_id(
            {"session_id": "abc-123", "client_ip": "10.0.0.1", "user_agent": "x"}
        )
        assert session_id == "abc_123"

    def test_derived_from_ip_and_user_agent(self):
        session_id = ConversationContextStore.get_session_id(
            {"client_ip": "10.0.0.1", "user_agent": "Mozilla/5.0"}
        )

        assert session_id == "10_0_0_1_Mozilla_5_0"
        assert session_id == ConversationContextStore.get_session_id(
            {"client_ip": "10.0.0.1", "user_agent": "Mozilla/5.0"}
        )

    def test_missing_metadata(self):
        assert ConversationContextStore.get_session_id({}) == "unknown_unknown"

    def test_length_is_bounded(self):
        session_id = ConversationContextStore.get_session_id({"session_id": "x" * 500})
        assert len(session_id) == 100


class TestStore:
    def test_unknown_session_has_no_context(self, store):
        assert store.get_context("nobody") is None

    def test_store_and_get(self, store):
        store.store_conversation(
            "s1",
            "Who is the president?",
            "The president is Dr. Roy G. Ponce.",
            {"detected_topics": (TopicMatch("leadership", ("president",)),), "complexity": "standard"},
        )
        context = store.get_context("s1")

        assert context is not None
        assert len(context.recent_turns) == 1
        assert context.last_turn.complexity == "standard"
        assert context.last_turn.entities.people == ["Roy G. Ponce"]
        assert context.recent_entities.topics == ["leadership"]

    def test_history_is_bounded(self, store):
        for i in range(5):
            store.store_conversation("s1", f"question {i}", f"answer {i}")

        context = store.get_context("s1")
        assert [t.prompt for t in context.recent_turns] == [
            "question 2",
            "question 3",
            "question 4",
        ]

    def test_sessions_expire_after_inactivity(self, store, clock):
        store.store_conversation("s1", "q", "a")
        clock.now += 61

        assert store.get_context("s1") is None
        assert store.get_stats()["active_conversations"] == 0

    def test_least_recently_used_session_is_evicted(self, store):
        store.store_conversation("s1", "q", "a")
        store.store_conversation("s2", "q", "a")
        store.get_context("s1")
        store.store_conversation("s3", "q", "a")

        assert store.get_context("s2") is None
        assert store.get_context("s1") is not None
        assert store.get_context("s3") is not None

    def test_clear_conversation(self, store):
        store.store_conversation("s1", "q", "a")

        assert store.clear_conversation("s1") is True
        assert store.clear_conversation("s1") is False
        assert store.get_context("s1") is None

    def test_stats(self, store):
        store.store_conversation("s1", "q1", "a1")
        store.store_conversation("s1", "q2", "a2")
        store.store_conversation("s2", "q", "a")

        assert store.get_stats() == {"active_conversations": 2, "total_turns": 3}


class TestResolvePronouns:
    def test_no_context_returns_prompt_unchanged(self, store):
        assert store.resolve_pronouns("What about him?", None) == "What about him?"

    def test_substitutes_single_named_person(self, store):
        store.store_conversation(
            "s1", "Who is the president of DOrSU?", "The president of DOrSU is Dr. Roy G. Ponce."
        )
        context = store.get_context("s1")

        assert store.resolve_pronouns("What about him?", context) == "What about Roy G. Ponce?"

    def test_possessive_pronoun(self, store):
        store.store_conversation("s1", "Who is the president?", "It is Dr. Roy G. Ponce.")
        context = store.get_context("s1")

        assert (
            store.resolve_pronouns("What are his achievements?", context)
            == "What are Roy G. Ponce's achievements?"
        )

    @pytest.mark.parametrize(
        "prompt, expected",
        [
            ("What is her email?", "What is Lea Jimenez's email?"),
            ("Where is her office?", "Where is Lea Jimenez's office?"),
            ("Tell me about her and the college", "Tell me about Lea Jimenez and the college"),
        ],
    )
    def test_her_before_a_noun_is_possessive(self, store, prompt, expected):
        store.store_conversation("s1", "Who is the FACET dean?", "Dr. Lea Jimenez.")
        context = store.get_context("s1")

        assert store.resolve_pronouns(prompt, context) == expected

    def test_ambiguous_antecedent_leaves_prompt_unchanged(self, store):
        store.store_conversation(
            "s1",
            "Who are the deans?",
            "Dr. Lea Jimenez leads FACET and Dr. Edito Sumile leads FALS.",
        )
        context = store.get_context("s1")

        assert store.resolve_pronouns("What about him?", context) == "What about him?"

    def test_no_person_leaves_prompt_unchanged(self, store):
        store.store_conversation("s1", "What programs exist?", "BSIT and BSAM are offered.")
        context = store.get_context("s1")

        assert store.resolve_pronouns("Tell me about her", context) == "Tell me about her"

    def test_latest_person_wins(self, store):
        store.store_conversation("s1", "Who is the president?", "Dr. Roy G. Ponce.")
        store.store_conversation("s1", "Who is the FACET dean?", "Dr. Lea Jimenez.")
        context = store.get_context("s1")

        assert store.resolve_pronouns("What about her?", context) == "What about Lea Jimenez?"

    def test_exam_year_follow_up(self, store):
        store.store_conversation(
            "s1",
            "What are the SUAST statistics for 2024?",
            "In 2024 there were 5000 applicants.",
        )
        context = store.get_context("s1")

        assert (
            store.resolve_pronouns("how about 2023", context)
            == "SUAST statistics for 2023"
        )

    def test_office_follow_up(self, store):
        store.store_conversation("s1", "What does the IRO do?", "The IRO handles linkages.")
        context = store.get_context("s1")

        assert (
            store.resolve_pronouns("what about the head", context)
            == "what about the IRO head"
        )


class TestExtractEntities:
    def test_extracts_referents(self):
        entities = ConversationContextStore.extract_entities(
            "Tell me about FACET",
            "FACET at the Main Campus offers BSIT. Contact the IRO. Updated 2025.",
        )

        assert entities.faculties == ["FACET"]
        assert entities.programs == ["BSIT"]
        assert entities.campuses == ["Main"]
        assert entities.offices == ["IRO"]
        assert entities.years == ["2025"]
