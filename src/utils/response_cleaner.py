"""Clean-up of model replies before they are cached and returned.

Models sometimes leak HTML into otherwise plain/markdown replies. Cleaning
runs once, before the reply is cached, so cached and fresh replies are
identical.
"""

import html
import re

_ANCHOR = re.compile(r"<a\s+[^>]*href=[\"']([^\"']+)[\"'][^>]*>(.*?)</a>", re.IGNORECASE | re.DOTALL)
_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_END = re.compile(r"</(p|div|li|h[1-6])>", re.IGNORECASE)
_TAG = re.compile(r"</?[a-zA-Z][a-zA-Z0-9]*(\s+[^<>]*)?/?>")
_ATTRIBUTE_REMNANT = re.compile(
    r"\s*(target|rel|class|style)=[\"'][^\"']*[\"']", re.IGNORECASE
)
_TRAILING_SPACES = re.compile(r"[ \t]+\n")
_MULTI_SPACES = re.compile(r"[ \t]{2,}")
_MULTI_NEWLINES = re.compile(r"\n{3,}")


def has_html_artifacts(text: str) -> bool:
    return bool(_TAG.search(text) or _ATTRIBUTE_REMNANT.search(text))


def _anchor_to_text(match: re.Match) -> str:
    url, label = match.group(1), match.group(2).strip()
    if not label or label == url:
        return url
    return f"{label}: {url}"


def clean_html_artifacts(text: str | None) -> str:
    """Strip HTML tags and attribute remnants, keeping link targets."""
    if not text:
        return ""
    if not has_html_artifacts(text) and "&" not in text:
        return text.strip()

    cleaned = _ANCHOR.sub(_anchor_to_text, text)
    cleaned = _BREAK.sub("\n", cleaned)
    cleaned = _BLOCK_END.sub("\n", cleaned)
    cleaned = _TAG.sub("", cleaned)
    cleaned = _ATTRIBUTE_REMNANT.sub("", cleaned)
    cleaned = html.unescape(cleaned)
    cleaned = _TRAILING_SPACES.sub("\n", cleaned)
    cleaned = _MULTI_SPACES.sub(" ", cleaned)
    cleaned = _MULTI_NEWLINES.sub("\n\n", cleaned)
    return cleaned.strip()
