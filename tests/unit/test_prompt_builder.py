"""Unit tests for prompt assembly from prompts.yaml."""

import pytest

from src.conversation.context_store import ConversationContextStore
from src.intent_detection.classifier import IntentClassifier
from src.pipeline.prompt_builder import PromptBuilder


@pytest.fixture
def builder(prompts_path):
    return PromptBuilder(prompts_path, year=2025)


@pytest.fixture
def kb_classification():
    return IntentClassifier().classify_intent("Who is the president of DOrSU?")


class TestPromptBuilder:
    def test_knowledge_base_prompt_layout(self, builder, kb_classification):
        prompt = builder.build_knowledge_base_prompt(None, kb_classification, "CHUNK-1")

        assert prompt.startswith("DOrSU Assistant")
        assert "Intent: information_query |" in prompt
        assert 'as of 2025' in prompt
        assert "Context:" not in prompt

        header = prompt.index("=== DOrSU KNOWLEDGE BASE")
        chunk = prompt.index("CHUNK-1")
        footer = prompt.index("=== END OF KNOWLEDGE BASE ===")
        assert header < chunk < footer
        assert prompt.rstrip().endswith("(including query parameters)")

    def test_conversation_context_line(self, builder, kb_classification):
        store = ConversationContextStore()
        store.store_conversation("s1", "Who is the president?", "Dr. Roy G. Ponce.")
        context = store.get_context("s1")

        prompt = builder.build_knowledge_base_prompt(context, kb_classification, "CHUNK")
        assert "Context: Previously discussed: Roy G. Ponce" in prompt

    def test_messages_include_examples(self, builder):
        messages = builder.build_messages("SYSTEM", "What is DOrSU?")

        assert messages[0].role == "system"
        assert messages[0].content == "SYSTEM"
        assert messages[-1].role == "user"
        assert messages[-1].content == "What is DOrSU?"
        # system + 3 example pairs + user
        assert len(messages) == 8
        assert [m.role for m in messages[1:3]] == ["user", "assistant"]

    def test_fallback_context(self, builder):
        assert "DAVAO ORIENTAL STATE UNIVERSITY" in builder.fallback_context

    def test_invalid_prompts_file(self, tmp_path):
        path = tmp_path / "prompts.yaml"
        path.write_text("just: text\n", encoding="utf-8")

        with pytest.raises(ValueError):
            PromptBuilder(path)

    def test_missing_prompts_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PromptBuilder(tmp_path / "missing.yaml")
