"""Text normalization for titles and snippets scraped from result pages."""

from __future__ import annotations

import re
import unicodedata

FALLBACK_SNIPPET = "No description available."
SNIPPET_MAX_LENGTH = 500
TRUNCATION_SUFFIX = "..."

_REGEX_WHITESPACE = re.compile(r"\s+")
# Trailing "Jump to ..." links and "| Site | Section" crumbs appended by the engine.
_SNIPPET_ARTIFACTS = (
    re.compile(r"\s*Jump to\b.*$", re.IGNORECASE),
    re.compile(r"\s*\|.*$"),
)
_KEEP_CONTROL = frozenset("\t\n\r")


def normalize_whitespace(text: str) -> str:
    return _REGEX_WHITESPACE.sub(" ", text).strip()


def strip_control_chars(text: str) -> str:
    """Remove Cc control characters except tab, newline and carriage return.

    Format characters such as ZWJ and ZWNJ are kept.
    """
    to_none = {
        ord(ch): None
        for ch in set(text)
        if unicodedata.category(ch) == "Cc" and ch not in _KEEP_CONTROL
    }
    if not to_none:
        return text
    return text.translate(to_none)


def truncate_text(
    text: str, max_length: int, suffix: str = TRUNCATION_SUFFIX
) -> str:
    if len(text) <= max_length:
        return text
    if max_length <= len(suffix):
        return text[:max_length]
    return text[: max_length - len(suffix)].rstrip() + suffix


def sanitize_text(text: str) -> str:
    """Normalize Unicode, drop control characters and collapse whitespace."""
    if not text:
        return ""

    text = unicodedata.normalize("NFC", text)
    text = strip_control_chars(text)
    return normalize_whitespace(text)


def clean_snippet(snippet: str, max_length: int = SNIPPET_MAX_LENGTH) -> str:
    cleaned = sanitize_text(snippet)
    for pattern in _SNIPPET_ARTIFACTS:
        cleaned = pattern.sub("", cleaned)
    return truncate_text(cleaned.strip(), max_length)
