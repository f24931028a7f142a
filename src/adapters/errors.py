"""Labeled failures raised by external collaborators."""


class ChatPipelineError(Exception):
    """Base class for failures that should reach the caller with a label."""

    code = "CHAT_PIPELINE_ERROR"

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class RetrievalError(ChatPipelineError):
    """The knowledge-base retrieval service failed."""

    code = "RETRIEVAL_ERROR"


class LanguageModelError(ChatPipelineError):
    """The language model call failed."""

    code = "LLM_ERROR"
