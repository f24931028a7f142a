"""Unit tests for query complexity analysis."""

import pytest

from src.intent_detection.classifier import IntentClassifier
from src.query_analysis.analyzer import QueryAnalyzer, SettingsCaps, round_half_up
from src.query_analysis.types import Complexity, IntentMatch


@pytest.fixture
def analyzer():
    return QueryAnalyzer()


class TestAnalyzeComplexity:
    """Test multiplier accumulation and tiers."""

    def test_list_all_programs_is_maximum_retrieval(self, analyzer):
        classification = IntentClassifier().classify_intent(
            "List ALL programs offered by DOrSU"
        )
        result = analyzer.analyze_complexity(
            "List ALL programs offered by DOrSU", classification
        )

        assert IntentMatch.LISTING in result.detected_intents
        assert "programs" in result.found_plurals
        # topic 0.5 + listing 1.5 + plural 1.5 + early plural 1.0
        assert result.rag_multiplier == pytest.approx(5.5)
        assert result.complexity == Complexity.MAXIMUM_RETRIEVAL
        assert result.settings.rag_sections == 40
        assert result.confidence == 100
        assert result.intent_classification is classification

    def test_greeting_is_standard(self, analyzer):
        result = analyzer.analyze_complexity("Hi")

        assert result.rag_multiplier == 1.0
        assert result.complexity == Complexity.STANDARD
        assert result.detected_topics == ()
        assert result.detected_intents == ()
        assert result.confidence == 25
        assert result.settings.max_tokens == 800
        assert result.settings.num_ctx == 4096
        assert result.settings.rag_sections == 15
        assert result.settings.rag_max_tokens == 2000

    def test_topic_detection_order(self, analyzer):
        result = analyzer.analyze_complexity("history of the main campus")

        assert [t.category for t in result.detected_topics] == ["campus", "historical"]
        assert result.detected_topics[0].keywords == ("campus", "main campus")

    def test_tagalog_topic(self, analyzer):
        result = analyzer.analyze_complexity("ano ang kasaysayan")

        assert [t.category for t in result.detected_topics] == ["historical"]
        assert IntentMatch.MULTIPLE in result.detected_intents

    def test_follow_up_flag(self, analyzer):
        result = analyzer.analyze_complexity("What about him?")

        assert result.is_follow_up
        assert IntentMatch.FOLLOW_UP in result.detected_intents
        assert result.rag_multiplier == pytest.approx(1.5)
        assert result.complexity == Complexity.MODERATE_RETRIEVAL

    def test_multi_part(self, analyzer):
        result = analyzer.analyze_complexity("Who is the dean? Where is the office?")
        assert result.is_multi_part

    def test_late_plural_gets_no_boost(self, analyzer):
        query = "could you kindly tell me about your programs"
        result = analyzer.analyze_complexity(query)

        assert query.find("programs") >= 20
        # topic 0.5 + comprehensive 0.3 + plural 1.5
        assert result.rag_multiplier == pytest.approx(3.3)

    def test_multiplier_is_clamped(self, analyzer):
        result = analyzer.analyze_complexity(
            "List all programs, courses, deans, faculties and campuses. How many? Total?"
        )
        assert result.rag_multiplier == 6.0

    @pytest.mark.parametrize("query", ["", "   ", "¿Qué?", "🎓", "a" * 20000])
    def test_never_raises(self, analyzer, query):
        result = analyzer.analyze_complexity(query)
        assert 1.0 <= result.rag_multiplier <= 6.0

    def test_idempotent(self, analyzer):
        first = analyzer.analyze_complexity("How many campuses does DOrSU have?")
        second = analyzer.analyze_complexity("How many campuses does DOrSU have?")

        assert first.rag_multiplier == second.rag_multiplier
        assert first.complexity == second.complexity
        assert first.settings == second.settings

    def test_case_and_whitespace_insensitive(self, analyzer):
        a = analyzer.analyze_complexity("  LIST ALL PROGRAMS  ")
        b = analyzer.analyze_complexity("list all programs")
        assert a.rag_multiplier == b.rag_multiplier

    @pytest.mark.parametrize(
        "base, extended",
        [
            ("programs", "programs and campuses"),
            ("who is the dean", "who is the dean of the college"),
            ("requirements", "how many requirements"),
        ],
    )
    def test_multiplier_monotonic(self, analyzer, base, extended):
        assert (
            analyzer.analyze_complexity(extended).rag_multiplier
            >= analyzer.analyze_complexity(base).rag_multiplier
        )


class TestOptimalSettings:
    """Test settings derivation from the multiplier."""

    def test_half_values_round_up(self, analyzer):
        settings = analyzer.get_optimal_settings(1.5)

        assert settings.max_tokens == 1200
        assert settings.num_ctx == 5017
        assert settings.rag_sections == 23  # 22.5
        assert settings.rag_max_tokens == 3000
        assert settings.temperature == 0.3

    def test_caps_at_maximum(self, analyzer):
        settings = analyzer.get_optimal_settings(6.0)

        assert settings.max_tokens == 1500
        assert settings.num_ctx == 10033
        assert settings.rag_sections == 40
        assert settings.rag_max_tokens == 4000

    @pytest.mark.parametrize("multiplier", [1.0, 1.7, 2.0, 3.3, 4.5, 6.0, 100.0, -5.0])
    def test_caps_never_exceeded(self, analyzer, multiplier):
        settings = analyzer.get_optimal_settings(multiplier)

        assert settings.max_tokens <= 1500
        assert settings.num_ctx <= 16384
        assert settings.rag_sections <= 40
        assert settings.rag_max_tokens <= 4000

    def test_out_of_range_multiplier_is_clamped(self, analyzer):
        assert analyzer.get_optimal_settings(100.0) == analyzer.get_optimal_settings(6.0)
        assert analyzer.get_optimal_settings(float("nan")) == analyzer.get_optimal_settings(1.0)

    def test_descriptions_follow_tiers(self, analyzer):
        assert analyzer.get_optimal_settings(1.0).description == "Standard retrieval"
        assert analyzer.get_optimal_settings(3.0).description.startswith("Maximum")

    def test_configured_caps_lower_limits(self):
        analyzer = QueryAnalyzer(SettingsCaps(rag_sections=20, max_tokens=1000))
        settings = analyzer.get_optimal_settings(6.0)

        assert settings.rag_sections == 20
        assert settings.max_tokens == 1000

    def test_configured_caps_cannot_raise_hard_caps(self):
        caps = SettingsCaps(rag_sections=100, max_tokens=9999, num_ctx=99999, rag_max_tokens=9999)

        assert caps.rag_sections == 40
        assert caps.max_tokens == 1500
        assert caps.num_ctx == 16384
        assert caps.rag_max_tokens == 4000

    def test_settings_to_dict(self, analyzer):
        data = analyzer.get_optimal_settings(1.0).to_dict()
        assert data["ragSections"] == 15
        assert data["maxTokens"] == 800


def test_round_half_up():
    assert round_half_up(22.5) == 23
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2


def test_format_analysis(analyzer):
    text = analyzer.format_analysis(analyzer.analyze_complexity("List all programs"))

    assert "MAXIMUM-RETRIEVAL" in text
    assert "sections" in text
