"""Unit tests for the two-layer intent classifier."""

import pytest

from src.intent_detection.classifier import IntentClassifier
from src.intent_detection.types import (
    ConversationalIntent,
    DataSource,
    IntentClassificationResult,
)


@pytest.fixture
def classifier():
    return IntentClassifier()


class TestConversationalIntent:
    """Layer 1: conversational register."""

    def test_greeting(self, classifier):
        result = classifier.classify_intent("Hi")

        assert result.conversational_intent == ConversationalIntent.GREETING
        assert result.conversational_confidence == 50

    def test_filipino_greeting(self, classifier):
        result = classifier.classify_intent("Magandang umaga po")
        assert result.conversational_intent == ConversationalIntent.GREETING

    def test_information_query(self, classifier):
        result = classifier.classify_intent("Who is the president of DOrSU?")
        assert result.conversational_intent == ConversationalIntent.INFORMATION_QUERY

    def test_tie_goes_to_earlier_rule(self, classifier):
        # "thanks" matches one farewell pattern and one gratitude pattern
        result = classifier.classify_intent("thanks")
        assert result.conversational_intent == ConversationalIntent.FAREWELL

    def test_more_matches_win(self, classifier):
        result = classifier.classify_intent("thank you, salamat")

        # Both gratitude patterns match; only one farewell pattern does
        assert result.conversational_intent == ConversationalIntent.GRATITUDE
        assert result.conversational_confidence == 100

    def test_emotion_expression(self, classifier):
        result = classifier.classify_intent("I feel stressed and overwhelmed")
        assert result.conversational_intent == ConversationalIntent.EMOTION_EXPRESSION

    def test_default_when_nothing_matches(self, classifier):
        result = classifier.classify_intent("xyzzy")

        assert result.conversational_intent == ConversationalIntent.INFORMATION_QUERY
        assert result.conversational_confidence == 30


class TestDataSource:
    """Layer 2: knowledge base vs general knowledge."""

    def test_direct_mention_uses_knowledge_base(self, classifier):
        result = classifier.classify_intent("List ALL programs offered by DOrSU")

        assert result.source == DataSource.KNOWLEDGE_BASE
        assert result.category == "dorsu"
        assert result.uses_knowledge_base
        assert result.institution_score > result.general_score

    def test_institutional_topic_without_name(self, classifier):
        result = classifier.classify_intent("What programs are available?")
        assert result.source == DataSource.KNOWLEDGE_BASE

    def test_known_person_is_institutional(self, classifier):
        result = classifier.classify_intent("Tell me about Roy Ponce")

        assert result.source == DataSource.KNOWLEDGE_BASE
        assert ("people", ("roy ponce",)) in result.detected_entities

    def test_general_science_question(self, classifier):
        result = classifier.classify_intent("What is photosynthesis?")

        assert result.source == DataSource.GENERAL_KNOWLEDGE
        assert result.category == "science"
        assert 0 < result.source_confidence <= 100

    def test_greeting_is_general_with_zero_confidence(self, classifier):
        result = classifier.classify_intent("Hi")

        assert result.source == DataSource.GENERAL_KNOWLEDGE
        assert result.category == "general"
        assert result.source_confidence == 0

    def test_entity_terms_match_whole_words(self, classifier):
        # "mati" must not fire inside "automatic"
        result = classifier.classify_intent("automatic")
        assert result.source == DataSource.GENERAL_KNOWLEDGE


class TestRobustness:
    """Classification never raises and is case-insensitive."""

    @pytest.mark.parametrize("query", ["", "   ", "\n\t", "こんにちは DOrSU", "🎓🎓"])
    def test_never_raises(self, classifier, query):
        result = classifier.classify_intent(query)
        assert isinstance(result, IntentClassificationResult)

    def test_empty_defaults(self, classifier):
        result = classifier.classify_intent("")

        assert result.conversational_intent == ConversationalIntent.INFORMATION_QUERY
        assert result.source == DataSource.GENERAL_KNOWLEDGE

    def test_case_insensitive(self, classifier):
        upper = classifier.classify_intent("WHAT IS DORSU")
        lower = classifier.classify_intent("what is dorsu")

        assert upper.to_public_dict() == lower.to_public_dict()
        assert upper.source == DataSource.KNOWLEDGE_BASE

    def test_result_is_immutable(self, classifier):
        result = classifier.classify_intent("Hi")
        with pytest.raises(AttributeError):
            result.category = "other"

    def test_confidence_validation(self):
        with pytest.raises(ValueError):
            IntentClassificationResult(
                conversational_intent=ConversationalIntent.GREETING,
                conversational_confidence=150,
                response_hint="",
                source=DataSource.GENERAL_KNOWLEDGE,
                source_confidence=0,
                category="general",
            )


class TestSystemPrompt:
    def test_public_projection(self, classifier):
        result = classifier.classify_intent("Hi")

        assert result.to_public_dict() == {
            "conversational": "greeting",
            "confidence": 50,
            "dataSource": "general_knowledge",
            "category": "general",
        }

    def test_general_prompt_is_deterministic(self, classifier):
        result = classifier.classify_intent("What is photosynthesis?")

        first = classifier.get_system_prompt(result)
        assert first == classifier.get_system_prompt(result)
        assert "general knowledge" in first
        assert "USER INTENT: information_query" in first

    def test_knowledge_base_prompt(self, classifier):
        result = classifier.classify_intent("Who is the president of DOrSU?")
        assert "ONLY the DOrSU knowledge base" in classifier.get_system_prompt(result)

    def test_format_classification(self, classifier):
        text = classifier.format_classification(classifier.classify_intent("Hi"))

        assert "GREETING" in text
        assert "General Knowledge" in text
