"""Rule tables and weights driving the retrieval multiplier.

Topic keywords cover English, Tagalog and Bisaya and match as substrings of
the lowercased query, so "dean" also fires inside "deans".
"""

import re
from dataclasses import dataclass

from .types import Complexity, IntentMatch


@dataclass(frozen=True)
class TopicRule:
    category: str
    keywords: tuple[str, ...]
    weight: float = 0.5


@dataclass(frozen=True)
class PhrasingRule:
    tag: IntentMatch
    pattern: re.Pattern
    weight: float


TOPIC_RULES: tuple[TopicRule, ...] = (
    TopicRule(
        "identity",
        (
            "core values", "mission", "vision", "mandate", "objectives", "hymn",
            "motto",
            # Tagalog / Bisaya
            "halaga", "misyon", "bisyon", "mandato", "mithi", "panan-awon",
        ),
    ),
    TopicRule(
        "leadership",
        (
            "president", "vice president", "chancellor", "dean", "director",
            "administration", "leadership", "board", "governance",
            "presidente", "bise presidente", "dekano", "direktor", "dire",
        ),
    ),
    TopicRule(
        "academic",
        (
            "programs", "courses", "faculties", "departments", "college",
            "baccalaureate", "degree", "curriculum",
            "programa", "kurso", "fakultad", "departamento", "kolehiyo",
        ),
    ),
    TopicRule(
        "campus",
        (
            "campus", "campuses", "location", "facilities", "building",
            "extension", "main campus",
            "kampus", "pasilidad", "gusali", "lokasyon",
        ),
    ),
    TopicRule(
        "enrollment",
        (
            "enrollment", "admission", "requirements", "steps", "process",
            "how to enroll", "register",
            "pag-enrol", "kinakailangan", "hakbang", "proseso", "pagpalista",
            "kinahanglan",
        ),
    ),
    TopicRule(
        "quality",
        (
            "quality commitments", "graduate outcomes", "accreditation",
            "standards", "kalidad", "akreditasyon",
        ),
    ),
    TopicRule(
        "historical",
        (
            "history", "founded", "established", "evolution", "development",
            "background",
            "kasaysayan", "itinatag", "pinagmulan", "gitukod",
        ),
    ),
)


def _rule(tag: IntentMatch, pattern: str, weight: float) -> PhrasingRule:
    return PhrasingRule(tag, re.compile(pattern, re.IGNORECASE), weight)


PHRASING_RULES: tuple[PhrasingRule, ...] = (
    _rule(
        IntentMatch.LISTING,
        r"\b(list|all|every|show\s+all|give\s+me\s+all|enumerate|name\s+all"
        r"|tell\s+me\s+the|what\s+are\s+the"
        r"|the\s+(programs|faculties|courses|campuses|deans|values|missions|requirements)"
        r"|lahat|ilista|itala|ipakita\s+lahat|tanan|lista|ipakita\s+tanan)\b",
        1.5,
    ),
    _rule(
        IntentMatch.COUNTING,
        r"\b(how\s+many|count|number\s+of|total|ilan|bilang|pila|ihap)\b",
        1.5,
    ),
    _rule(
        IntentMatch.MULTIPLE,
        r"\b(what\s+are|who\s+are|can\s+you\s+(tell|list|show)|ano\s+ang|sino\s+ang"
        r"|maaari\s+mo\s+bang|unsa\s+ang|kinsa\s+ang|mahimo\s+ba\s+nimo)\b",
        1.0,
    ),
    _rule(
        IntentMatch.COMPREHENSIVE,
        r"\b(explain|describe|tell\s+me\s+about|what\s+is|who\s+is|ipaliwanag|sabihin"
        r"|ano\s+(ba\s+)?ang|sino\s+(ba\s+)?ang|ipasabot|sultihi|unsa\s+ang|kinsa\s+ang)\b",
        0.3,
    ),
    _rule(
        IntentMatch.FOLLOW_UP,
        r"\b(he|she|him|his|her|they|their|it|that|this|them|those"
        r"|siya|niya|kanyang|kanila|ito|iyan|iya|kana|kini)\b",
        0.5,
    ),
    _rule(IntentMatch.MULTI_PART, r"\?\s*.*\?", 1.0),
)

PLURAL_KEYWORDS: tuple[str, ...] = (
    "programs", "courses", "deans", "faculties", "departments",
    "campuses", "values", "outcomes", "members", "leaders",
    "requirements", "steps", "processes", "policies", "missions",
    "objectives", "commitments", "buildings", "facilities", "colleges",
)
PLURAL_WEIGHT = 1.5
# A plural starting this close to the front is usually the subject ("List all programs").
EARLY_PLURAL_OFFSET = 20
EARLY_PLURAL_BOOST = 1.0

MIN_MULTIPLIER = 1.0
MAX_MULTIPLIER = 6.0

# Descending thresholds: first match wins.
COMPLEXITY_TIERS: tuple[tuple[float, Complexity, str], ...] = (
    (3.0, Complexity.MAXIMUM_RETRIEVAL, "Maximum data retrieval (comprehensive answer)"),
    (2.0, Complexity.HIGH_RETRIEVAL, "High data retrieval (detailed answer)"),
    (1.5, Complexity.MODERATE_RETRIEVAL, "Moderate data retrieval (enhanced answer)"),
)
STANDARD_DESCRIPTION = "Standard retrieval"

BASE_MAX_TOKENS = 800
BASE_NUM_CTX = 4096
BASE_RAG_SECTIONS = 15
BASE_RAG_MAX_TOKENS = 2000
BASE_TEMPERATURE = 0.3
