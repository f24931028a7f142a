"""Chat pipeline: preprocessing, prompt assembly and request orchestration."""

from src.pipeline.chat_pipeline import ChatPipeline, ChatResult
from src.pipeline.prompt_builder import PromptBuilder
from src.pipeline.query_preprocessor import QueryPreprocessor, sanitize_prompt

__all__ = [
    "ChatPipeline",
    "ChatResult",
    "PromptBuilder",
    "QueryPreprocessor",
    "sanitize_prompt",
]
