"""Rule tables for intent classification.

Every table here is plain data: adding a language or an entity is a change to
these lists, not to the classifier. Patterns are compiled once at import time.
"""

import re

from .types import ConversationalIntent, ConversationalRule


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


def _terms(*terms: str) -> tuple[re.Pattern, ...]:
    """Whole-word matchers for literal terms."""
    return tuple(
        re.compile(r"\b" + re.escape(t) + r"\b", re.IGNORECASE) for t in terms
    )


# Layer 1: conversational register. Order is priority order for ties.
CONVERSATIONAL_RULES: tuple[ConversationalRule, ...] = (
    ConversationalRule(
        ConversationalIntent.GREETING,
        _compile(
            r"\b(hi|hello|hey|good\s+(morning|afternoon|evening|day)|greetings|sup|yo)\b",
            r"\b(kumusta|kamusta|musta|kumusta\s+ka|oy|hoy)\b",
            r"\b(magandang\s+(umaga|hapon|gabi|araw))\b",
        ),
        "Respond warmly and briefly, then ask how you can help",
    ),
    ConversationalRule(
        ConversationalIntent.FAREWELL,
        _compile(
            r"\b(bye|goodbye|see\s+you|take\s+care|farewell|later|peace|cya|ttyl)\b",
            r"\b(paalam|sige|thank\s+you|thanks|salamat|thank\s+you\s+so\s+much)\b",
            r"\b(ayos|okay\s+na|gets\s+na|sige\s+salamat)\b",
        ),
        "Respond kindly, wish them well, stay open for future questions",
    ),
    ConversationalRule(
        ConversationalIntent.GRATITUDE,
        _compile(
            r"\b(thank|thanks|thank\s+you|thx|ty|appreciate|grateful)\b",
            r"\b(salamat|maraming\s+salamat|daghang\s+salamat)\b",
        ),
        "Acknowledge warmly and offer continued assistance",
    ),
    ConversationalRule(
        ConversationalIntent.EMOTION_EXPRESSION,
        _compile(
            r"\b(i\s+feel|i'm|i\s+am)\s+(sad|happy|stressed|anxious|worried|excited"
            r"|frustrated|confused|tired|overwhelmed)\b",
            r"\b(nalilito|nerbiyos|na\s*stress|nalulungkot|masaya|kinakabahan)\b",
            r"\b(help\s+me|i\s+need\s+help|struggling|having\s+trouble|difficulty)\b",
        ),
        "Respond empathetically, acknowledge their feelings, offer relevant support",
    ),
    ConversationalRule(
        ConversationalIntent.TASK_REQUEST,
        _compile(
            r"\b(remind\s+me|set\s+a?\s*reminder|schedule|add\s+to|create\s+a)\b",
            r"\b(can\s+you|could\s+you|please|paki|pwede\s+mo)\s+"
            r"(help|assist|remind|set|schedule|create)\b",
            r"\b(i\s+need\s+to|i\s+want\s+to|i\s+have\s+to)\b",
        ),
        "Confirm understanding, clarify if needed, then act or guide",
    ),
    ConversationalRule(
        ConversationalIntent.INFORMATION_QUERY,
        _compile(
            r"\b(what\s+is|what\s+are|what's|tell\s+me\s+about|explain|describe)\b",
            r"\b(how\s+to|how\s+do\s+i|how\s+can\s+i|where\s+is|where\s+can\s+i"
            r"|when\s+is|when\s+can)\b",
            r"\b(who\s+is|who\s+are|why\s+is|why\s+are|why\s+do|which)\b",
            r"\b(ano\s+ang|sino\s+ang|saan\s+ang|kailan|paano|bakit)\b",
            r"\b(unsa|asa|kinsa|kanus-a|ngano|giunsa)\b",
            r"\b(list|show\s+me|give\s+me|can\s+you\s+show|may\s+i\s+know)\b",
        ),
        "Provide comprehensive, factual information from knowledge base",
    ),
    ConversationalRule(
        ConversationalIntent.CLARIFICATION_REQUEST,
        _compile(
            r"\b(what\s+do\s+you\s+mean|can\s+you\s+explain|i\s+don't\s+understand"
            r"|clarify|confused)\b",
            r"\b(elaborate|more\s+details|give\s+example|example|what\s+about)\b",
            r"\b(ano\s+ibig\s+sabihin|hindi\s+ko\s+maintindihan)\b",
        ),
        "Rephrase and provide more context or examples",
    ),
    ConversationalRule(
        ConversationalIntent.FOLLOW_UP,
        _compile(
            r"\b(and|also|what\s+about|how\s+about|what\s+else|anything\s+else|more)\b",
            r"\b(he|she|his|her|their|that|this|it)\b",
            r"\b(ano\s+pa|paano\s+naman|yung|yun)\b",
        ),
        "Use conversation context to understand reference",
    ),
    ConversationalRule(
        ConversationalIntent.SMALL_TALK,
        _compile(
            r"\b(how\s+are\s+you|what's\s+up|how's\s+it\s+going|how\s+do\s+you\s+do)\b",
            r"\b(nice\s+to\s+meet|good\s+to\s+see|pleasure\s+to|lovely)\b",
            r"\b(weather|day|weekend|today)\b",
        ),
        "Keep it brief, friendly, and transition to offering help",
    ),
)

DEFAULT_CONVERSATIONAL_CONFIDENCE = 30
DEFAULT_RESPONSE_HINT = "Provide relevant information"
CONFIDENCE_PER_PATTERN = 50

# Layer 2: data source. Weights sit next to the rules they score.
INSTITUTION_MENTION_WEIGHT = 100
INSTITUTION_MENTIONS = _terms(
    "dorsu",
    "davao oriental state university",
    "davao oriental university",
    "doscst",
    "mati university",
    "mati city university",
    "university ng davao oriental",
    "unibersidad ng davao oriental",
    "unibersidad sa davao oriental",
)

INSTITUTION_ENTITY_WEIGHT = 50
INSTITUTION_ENTITIES: dict[str, tuple[str, ...]] = {
    "people": (
        "roy ponce", "roy g. ponce", "roy padilla", "lilibeth galvez",
        "lea jimenez", "edito sumile", "misael clapano", "anglie nemenzo",
        "richard maravillas", "jovanie garay", "leopoldo aquino",
        "gemma valdez", "eleanor vilela", "rizaldy maypa", "danilo jacobe",
        "rex aparicio", "goriel llanita", "michelle tabotabo", "jocelyn arles",
    ),
    "faculties": (
        "facet", "fals", "fted", "fbm", "fcje", "fnahs", "fhusocom",
        "faculty of computing engineering and technology",
        "faculty of agriculture and life sciences",
        "faculty of teacher education",
        "faculty of business management",
        "faculty of criminal justice education",
        "faculty of nursing and allied health",
        "faculty of humanities social sciences",
    ),
    "campuses": (
        "main campus", "baganga campus", "banaybanay campus",
        "cateel campus", "san isidro campus", "tarragona campus",
        "extension campus",
    ),
    "programs": (
        "bitm", "bsmrs", "bsam", "bses", "bced", "bsned", "bped", "btled",
        "industrial technology management", "mathematics with research statistics",
        "agribusiness management", "environmental science",
    ),
    "locations": (
        "mati", "mati city", "davao oriental", "guang-guang", "dahican",
        "city of mati", "lungsod ng mati",
    ),
    "topics": (
        "subangan museum", "mt. hamiguitan", "hamiguitan",
        "happy fish kids", "happy forest kids", "happy farm kids",
        "regenerative futures", "unesco world heritage", "suast",
        "university student council",
    ),
}
COMPILED_INSTITUTION_ENTITIES: dict[str, tuple[tuple[str, re.Pattern], ...]] = {
    category: tuple(zip(terms, _terms(*terms)))
    for category, terms in INSTITUTION_ENTITIES.items()
}

INSTITUTION_QUESTION_WEIGHT = 30
INSTITUTION_QUESTION_PATTERNS = _compile(
    r"\b(president|vice president|dean|director|chancellor|administrator|board of regents)"
    r"\s+(of|ng)?\s*(dorsu|the university|our university)?\b",
    r"\bwho\s+(is|ang)\s+the\s+(president|vp|dean|director|head)\b",
    r"\b(programs|courses|faculties|departments|colleges)\s+(offered|available|in|ng|sa)"
    r"\s*(dorsu|the university)?\b",
    r"\bhow\s+to\s+(enroll|apply|register)\s+(in|sa|ng)?\s*(dorsu)?\b",
    r"\b(admission|enrollment|requirements|tuition|fees)\s+(for|in|sa|ng)\s*(dorsu)?\b",
    r"\bwhere\s+is\s+(dorsu|the university|main campus)\b",
    r"\b(location|address|campus|building|facility)\s+(of|ng)?\s*(dorsu)?\b",
    r"\b(history|founded|established|background|evolution)\s+(of|ng)?\s*(dorsu)?\b",
    r"\b(vision|mission|core values|mandate|objectives|hymn|motto)\s+(of|ng)?\s*(dorsu)?\b",
    r"\b(accreditation|quality|standards|graduate outcomes)\s+(of|ng)?\s*(dorsu)?\b",
    r"\b(research|extension|innovation|projects)\s+(at|in|ng|sa)\s*(dorsu)?\b",
)

# Subject matter that only makes sense for the institution even without naming it.
INSTITUTION_TOPIC_WEIGHT = 25
INSTITUTION_TOPIC_TERMS = _compile(
    r"\bprograms?\b",
    r"\b(presidents?|vice\s+presidents?|deans?|chancellor)\b",
    r"\bcampus(es)?\b",
    r"\b(enroll(ment)?|admissions?|pag-enrol|pagpalista)\b",
    r"\b(scholarships?|tuition|registrar)\b",
    r"\b(student\s+council|usc)\b",
    r"\b(core\s+values|mission|vision|mandate|hymn)\b",
    r"\baccreditation\b",
    r"\b(kampus|programa|kurso|dekano|presidente)\b",
)

GENERAL_PATTERN_WEIGHT = 40
GENERAL_KNOWLEDGE_PATTERNS: dict[str, tuple[re.Pattern, ...]] = {
    "science": _compile(
        r"\bwhat\s+is\s+(photosynthesis|gravity|atom|molecule|dna|rna|cell|protein|enzyme)\b",
        r"\bexplain\s+(quantum|relativity|evolution|thermodynamics|chemistry|physics|biology)\b",
        r"\bhow\s+does\s+(the\s+internet|wifi|bluetooth|gps|computer|ai|machine learning)\s+work\b",
        r"\b(programming|coding|algorithm|data structure|python|javascript|java)\b|c\+\+",
    ),
    "math": _compile(
        r"\bsolve\s+(equation|integral|derivative|matrix|problem)\b",
        r"\bcalculate\s+(area|volume|perimeter|distance|speed)\b",
        r"\bwhat\s+is\s+(calculus|algebra|geometry|trigonometry|statistics|probability)\b",
        r"\b(pythagorean theorem|quadratic formula|derivative|integral)\b",
    ),
    "history": _compile(
        r"\bwho\s+(is|was)\s+(albert einstein|isaac newton|marie curie|stephen hawking"
        r"|nikola tesla)\b",
        r"\bwhat\s+(happened|occurred)\s+in\s+\d{4}\b",
        r"\b(world war|cold war|industrial revolution|renaissance|ancient civilization)\b",
        r"\bwhere\s+is\s+(paris|tokyo|new york|london|beijing|manila)\b",
        r"\b(philippines|filipino|pilipinas)\s+(history|culture|government|president|senator)\b",
    ),
    "language": _compile(
        r"\btranslate\s+.+\s+to\s+(english|tagalog|bisaya|cebuano|spanish|chinese)\b",
        r"\bwhat\s+does\s+.+\s+mean\s+in\s+(english|tagalog|bisaya)\b",
        r"\b(grammar|spelling|punctuation|sentence structure)\b",
        r"\bwho\s+wrote\s+(novel|book|poem|story)\b",
    ),
    "current_events": _compile(
        r"\b(latest news|current events|today|yesterday|this week|this month)\b",
        r"\bwhat\s+happened\s+(today|yesterday|recently)\b",
        r"\b(election|politics|government|congress|senate)\s+(today|now|current)\b",
    ),
    "health": _compile(
        r"\bwhat\s+(are\s+)?(symptoms|causes|treatment|cure)\s+of\s+\w+\b",
        r"\bhow\s+to\s+(treat|prevent|cure|diagnose)\b",
        r"\b(medicine|drug|vaccine|therapy|surgery|diagnosis)\b",
    ),
    "technology": _compile(
        r"\bhow\s+to\s+use\s+(microsoft|google|facebook|youtube|excel|word|powerpoint)\b",
        r"\bwhat\s+is\s+(chatgpt|ai|artificial intelligence|blockchain|cryptocurrency)\b",
        r"\b(install|download|setup|configure|troubleshoot)\b",
    ),
    "entertainment": _compile(
        r"\bwho\s+(is|are)\s+(actor|actress|singer|artist|celebrity|musician)\b",
        r"\bwhat\s+is\s+(movie|film|song|album|tv show|series)\b",
        r"\b(sports|football|basketball|soccer|tennis|olympics)\b",
    ),
    "philosophy": _compile(
        r"\bwhat\s+is\s+(meaning\s+of\s+life|purpose|existence|consciousness|free will)\b",
        r"\b(philosophy|ethics|morality|virtue|justice)\b",
        r"\b(socrates|plato|aristotle|kant|nietzsche)\b",
    ),
}

# Only applied while nothing institution-specific has been found.
GENERIC_UNIVERSITY_WEIGHT = 20
GENERIC_UNIVERSITY_CLUE = re.compile(
    r"\b(university|college|school|campus|student|teacher|professor|education)\b",
    re.IGNORECASE,
)
GENERIC_WHAT_IS_WEIGHT = 15
GENERIC_WHAT_IS_CLUE = re.compile(
    r"\bwhat\s+is\s+(?!dorsu|the\s+president|the\s+mission)\w+", re.IGNORECASE
)

INSTITUTION_CATEGORY = "dorsu"
DEFAULT_CATEGORY = "general"
