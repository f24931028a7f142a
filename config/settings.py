import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ceilings imposed by the downstream token budget; configuration may only lower them.
HARD_MAX_TOKENS_CAP = 1500
HARD_NUM_CTX_CAP = 16384
HARD_RAG_SECTIONS_CAP = 40
HARD_RAG_MAX_TOKENS_CAP = 4000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Language model (any OpenAI-compatible chat endpoint: Groq, Ollama, ...)
    llm_api_key: str | None = Field(default=None, description="LLM provider API key")
    llm_api_base: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL for the OpenAI-compatible chat API",
    )
    llm_model: str = Field(
        default="llama-3.1-70b-versatile", description="Chat model name"
    )
    llm_provider: str = Field(
        default="groq", description="Provider label reported in chat responses"
    )
    llm_timeout_seconds: float = Field(
        default=60.0, description="Timeout for a single chat completion call"
    )
    llm_max_retries: int = Field(
        default=3, description="Maximum attempts for a chat completion call"
    )

    # Knowledge-base retrieval service
    retrieval_base_url: str | None = Field(
        default=None,
        description="Base URL of the knowledge-base retrieval service; "
        "the static fallback context is used when unset",
    )
    retrieval_timeout_seconds: float = Field(
        default=30.0, description="Timeout for a retrieval call"
    )

    # Response cache
    response_cache_enabled: bool = Field(
        default=True, description="Enable the in-process AI response cache"
    )
    response_cache_max_entries: int = Field(
        default=1000, description="Maximum cached replies before FIFO eviction"
    )

    # Conversation memory
    conversation_max_turns: int = Field(
        default=5, description="Turns kept per session for follow-up resolution"
    )
    conversation_ttl_seconds: float = Field(
        default=600.0, description="Inactivity period after which a session expires"
    )
    conversation_max_sessions: int = Field(
        default=1000, description="Maximum concurrently tracked sessions"
    )

    # Retrieval / generation caps
    max_tokens_cap: int = Field(
        default=HARD_MAX_TOKENS_CAP, description="Upper bound for generated tokens"
    )
    num_ctx_cap: int = Field(
        default=HARD_NUM_CTX_CAP, description="Upper bound for the context window"
    )
    rag_sections_cap: int = Field(
        default=HARD_RAG_SECTIONS_CAP, description="Upper bound for retrieved sections"
    )
    rag_max_tokens_cap: int = Field(
        default=HARD_RAG_MAX_TOKENS_CAP,
        description="Upper bound for retrieved context tokens",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")
    log_file_path: str | None = Field(
        default=None, description="Optional rotating log file"
    )

    # Server Configuration
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3000, description="API server port")

    # Prompts Configuration
    prompts_path: Path = Field(
        default=Path(__file__).parent / "prompts.yaml",
        description="Path to prompts configuration file",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,  # Make settings immutable
        extra="ignore",
    )

    def __init__(self, **values):
        # Check if DOTENV_PATH is set for testing
        dotenv_path = os.environ.get("DOTENV_PATH")
        if dotenv_path:
            values["_env_file"] = dotenv_path
        super().__init__(**values)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v_upper

    @field_validator("api_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator(
        "llm_max_retries",
        "response_cache_max_entries",
        "conversation_max_turns",
        "conversation_max_sessions",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate value is positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("max_tokens_cap")
    @classmethod
    def validate_max_tokens_cap(cls, v: int) -> int:
        return _within_hard_cap(v, HARD_MAX_TOKENS_CAP, "max_tokens_cap")

    @field_validator("num_ctx_cap")
    @classmethod
    def validate_num_ctx_cap(cls, v: int) -> int:
        return _within_hard_cap(v, HARD_NUM_CTX_CAP, "num_ctx_cap")

    @field_validator("rag_sections_cap")
    @classmethod
    def validate_rag_sections_cap(cls, v: int) -> int:
        return _within_hard_cap(v, HARD_RAG_SECTIONS_CAP, "rag_sections_cap")

    @field_validator("rag_max_tokens_cap")
    @classmethod
    def validate_rag_max_tokens_cap(cls, v: int) -> int:
        return _within_hard_cap(v, HARD_RAG_MAX_TOKENS_CAP, "rag_max_tokens_cap")


def _within_hard_cap(value: int, hard_cap: int, name: str) -> int:
    """Caps can be tightened through configuration but never raised."""
    if not 1 <= value <= hard_cap:
        raise ValueError(f"{name} must be between 1 and {hard_cap}")
    return value


# Create global settings instance
settings = Settings()
