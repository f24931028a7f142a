"""Input sanitization and query rewrites applied before classification."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 10000

_ZERO_WIDTH = re.compile("[\\u200b-\\u200f\\u2060\\ufeff]")
_WHITESPACE = re.compile(r"\s+")

_WHAT_IS_DORSU = re.compile(r"what is dorsu", re.IGNORECASE)
_COURSE = re.compile(r"\b(course|courses)\b", re.IGNORECASE)
_USC = re.compile(r"\b(usc|university student council)\b", re.IGNORECASE)
_USC_WORD = re.compile(r"\busc\b", re.IGNORECASE)
_WHAT_IS_USC = re.compile(r"\bwhat\s+(is|are)\s+usc\b", re.IGNORECASE)
_OTHER_USC = re.compile(r"southern california|south pacific", re.IGNORECASE)
_DORSU = re.compile(r"\bdorsu\b", re.IGNORECASE)
_DORSU_MENTION = re.compile(r"\b(dorsu|davao oriental state university)\b", re.IGNORECASE)
_MANUAL = re.compile(r"\b(manual|guide|handbook|documentation)\b", re.IGNORECASE)
_WEBSITE = re.compile(r"\b(website|link|url|site|webpage|page)\b", re.IGNORECASE)

USC_OVERVIEW_QUERY = (
    "Tell me everything about the University Student Council - USC of DOrSU including "
    "its mission, beliefs, objectives, logo symbolism, and 2025 executives."
)
MANUALS_QUERY = (
    "What manuals, guides, or handbooks are available for DOrSU students? "
    "Include Pre-Admission Manual and Grade Inquiry Manual with their links."
)
WEBSITE_QUERY = (
    "What is the official DOrSU website link? Include all important links like "
    "location map, university seal, hymn, and office links (IRO, IP-TBM, HSU, CGAD)."
)


def sanitize_prompt(prompt: str | None) -> str:
    """Validate and sanitize a raw prompt."""
    if prompt is None:
        return ""
    if not isinstance(prompt, str):
        prompt = str(prompt)

    prompt = _ZERO_WIDTH.sub("", prompt)
    prompt = _WHITESPACE.sub(" ", prompt).strip()

    if len(prompt) > MAX_PROMPT_LENGTH:
        logger.warning(
            f"Prompt too long ({len(prompt)} chars), truncating to {MAX_PROMPT_LENGTH}"
        )
        prompt = prompt[:MAX_PROMPT_LENGTH]

    return prompt


@dataclass(frozen=True)
class RewriteRule:
    """A named rewrite applied when ``applies`` matches the original prompt."""

    name: str
    applies: Callable[[str], bool]
    rewrite: Callable[[str], str]


def _is_usc_query(prompt: str) -> bool:
    return bool(_USC.search(prompt) and not _OTHER_USC.search(prompt))


def _is_usc_overview_query(prompt: str) -> bool:
    return _is_usc_query(prompt) and bool(_WHAT_IS_USC.search(prompt))


def _is_usc_details_query(prompt: str) -> bool:
    lower = prompt.lower()
    return (
        _is_usc_query(prompt)
        and not _is_usc_overview_query(prompt)
        and "tell me about" in lower
        and "usc" in lower
    )


def _is_dorsu_usc_query(prompt: str) -> bool:
    return (
        _is_usc_query(prompt)
        and not _is_usc_overview_query(prompt)
        and not _is_usc_details_query(prompt)
        and not _DORSU.search(prompt)
    )


# Later full-query rewrites replace earlier ones.
REWRITE_RULES: tuple[RewriteRule, ...] = (
    RewriteRule(
        name="what_is_dorsu",
        applies=lambda p: bool(_WHAT_IS_DORSU.search(p)),
        rewrite=lambda _: "What is DOrSU (Davao Oriental State University)?",
    ),
    RewriteRule(
        name="usc_overview",
        applies=_is_usc_overview_query,
        rewrite=lambda _: USC_OVERVIEW_QUERY,
    ),
    RewriteRule(
        name="usc_details",
        applies=_is_usc_details_query,
        rewrite=lambda p: _USC_WORD.sub("DOrSU University Student Council - USC", p)
        + " - provide complete details",
    ),
    RewriteRule(
        name="usc_context",
        applies=_is_dorsu_usc_query,
        rewrite=lambda p: f"{p} - referring to DOrSU University Student Council",
    ),
    RewriteRule(
        name="manuals",
        applies=lambda p: bool(_MANUAL.search(p)),
        rewrite=lambda _: MANUALS_QUERY,
    ),
    RewriteRule(
        name="website_links",
        applies=lambda p: bool(_WEBSITE.search(p) and _DORSU_MENTION.search(p)),
        rewrite=lambda _: WEBSITE_QUERY,
    ),
    RewriteRule(
        name="course_as_program",
        applies=lambda p: bool(_COURSE.search(p)),
        rewrite=lambda p: _COURSE.sub("program", p),
    ),
)


class QueryPreprocessor:
    """Applies the rewrite rules in order.

    Each rule tests the original prompt and transforms the current one.
    """

    def __init__(self, rules: tuple[RewriteRule, ...] = REWRITE_RULES):
        self.rules = rules

    def preprocess(self, prompt: str) -> str:
        processed = prompt
        applied = []
        for rule in self.rules:
            if rule.applies(prompt):
                processed = rule.rewrite(processed)
                applied.append(rule.name)

        if applied:
            logger.info(f"✏️ Query rewritten ({', '.join(applied)}): '{processed[:80]}'")
        return processed
