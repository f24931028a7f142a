"""Resolution of the settings actually used for a request.

Precedence is explicit and ordered: a request override beats the heuristic
settings, which beat the static defaults. Whatever wins is clamped to the caps.
"""

from dataclasses import dataclass
from typing import Any

from . import rules
from .analyzer import SettingsCaps
from .types import RetrievalSettings

DEFAULT_SETTINGS = RetrievalSettings(
    max_tokens=rules.BASE_MAX_TOKENS,
    num_ctx=rules.BASE_NUM_CTX,
    rag_sections=rules.BASE_RAG_SECTIONS,
    rag_max_tokens=rules.BASE_RAG_MAX_TOKENS,
    temperature=rules.BASE_TEMPERATURE,
    description=rules.STANDARD_DESCRIPTION,
)


@dataclass(frozen=True)
class GenerationOptions:
    """Options passed to the language model."""

    max_tokens: int
    temperature: float
    num_ctx: int
    top_p: float = 0.5
    top_k: int = 20
    repeat_penalty: float = 1.1


@dataclass(frozen=True)
class ResolvedSettings:
    """Generation options plus the retrieval parameters for one request."""

    generation: GenerationOptions
    rag_sections: int
    rag_max_tokens: int


def first_defined(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def resolve_generation_options(
    *,
    override_max_tokens: int | None = None,
    override_temperature: float | None = None,
    heuristic: RetrievalSettings | None = None,
    defaults: RetrievalSettings = DEFAULT_SETTINGS,
    caps: SettingsCaps | None = None,
) -> ResolvedSettings:
    """Merge request overrides, heuristic settings and defaults.

    Args:
        override_max_tokens: ``maxTokens`` from the chat request, if any.
        override_temperature: ``temperature`` from the chat request, if any.
        heuristic: Settings derived by the query analyzer.
        defaults: Fallback settings.
        caps: Upper bounds; overrides are clamped like everything else.

    Returns:
        The resolved settings.
    """
    caps = caps or SettingsCaps()
    heuristic = heuristic or defaults

    max_tokens = first_defined(override_max_tokens, heuristic.max_tokens, defaults.max_tokens)
    temperature = first_defined(
        override_temperature, heuristic.temperature, defaults.temperature
    )
    num_ctx = first_defined(heuristic.num_ctx, defaults.num_ctx)
    rag_sections = first_defined(heuristic.rag_sections, defaults.rag_sections)
    rag_max_tokens = first_defined(heuristic.rag_max_tokens, defaults.rag_max_tokens)

    return ResolvedSettings(
        generation=GenerationOptions(
            max_tokens=max(1, min(caps.max_tokens, int(max_tokens))),
            temperature=float(temperature),
            num_ctx=max(1, min(caps.num_ctx, int(num_ctx))),
        ),
        rag_sections=max(1, min(caps.rag_sections, int(rag_sections))),
        rag_max_tokens=max(1, min(caps.rag_max_tokens, int(rag_max_tokens))),
    )
