"""Canonical display/grouping keys for free-text names."""

import re
from typing import Optional

UNKNOWN = "Unknown"

_TOKEN_SPLIT = re.compile(r"[\s\-]+")


def _title_tokens(text: str) -> str:
    tokens = [t for t in _TOKEN_SPLIT.split(text) if t]
    if not tokens:
        return UNKNOWN
    return " ".join(t.capitalize() for t in tokens)


def normalize_name(raw: Optional[str]) -> str:
    """Normalize an agency or agent name.

    "abc   realty" and "ABC Realty" both become "Abc Realty". Blank input
    maps to "Unknown". Punctuation inside a word is kept as-is.
    """
    if raw is None or not str(raw).strip():
        return UNKNOWN
    return _title_tokens(str(raw).strip().casefold())


def normalize_suburb(raw: Optional[str]) -> str:
    """Normalize a suburb name ("SPRING-HILL" -> "Spring Hill")."""
    if raw is None or not str(raw).strip():
        return UNKNOWN
    return _title_tokens(str(raw).strip().upper())


def normalize_street(raw: Optional[str]) -> str:
    """Normalize a street name."""
    return normalize_name(raw)


def street_key(street: Optional[str], suburb: Optional[str]) -> str:
    """Composite key for a street bucket, e.g. "Main St, Springfield"."""
    return f"{normalize_street(street)}, {normalize_suburb(suburb)}"
