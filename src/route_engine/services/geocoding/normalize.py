"""Address clean-up applied before geocoding."""

from __future__ import annotations

import re

FILLER_PHRASES = (
    "next to",
    "across from",
    "close to",
    "in front of",
    "near",
    "beside",
    "opposite",
    "around",
    "behind",
    "inside",
    "outside",
    "between",
)

STREET_ABBREVIATIONS = (
    (r"\bSt\b\.?", "Street"),
    (r"\bRd\b\.?", "Road"),
    (r"\bAve\b\.?", "Avenue"),
    (r"\bBlvd\b\.?", "Boulevard"),
    (r"\bLn\b\.?", "Lane"),
    (r"\bPl\b\.?", "Place"),
    # Malaysian street names
    (r"\bJln\b\.?", "Jalan"),
    (r"\bPsrn\b\.?", "Persiaran"),
    (r"\bLrg\b\.?", "Lorong"),
    (r"\bTmn\b\.?", "Taman"),
)

_FILLER_RE = re.compile(r"\b(?:" + "|".join(re.escape(p) for p in FILLER_PHRASES) + r")\b", re.IGNORECASE)
_STREET_RES = tuple((re.compile(pattern, re.IGNORECASE), word) for pattern, word in STREET_ABBREVIATIONS)


def normalize_address(address: str | None) -> str:
    """Collapse whitespace, drop filler words, expand street abbreviations.

    >>> normalize_address("12-3  Jln. Ampang, near KLCC,")
    '12 Unit 3 Jalan Ampang, KLCC'
    """
    if not address:
        return ""

    normalized = re.sub(r"\s+", " ", address.strip())
    normalized = normalized.replace("\\", "/")
    normalized = _FILLER_RE.sub(" ", normalized)
    # Separate postcodes glued to the preceding word
    normalized = re.sub(r"([a-z])(\d{5,7})\b", r"\1 \2", normalized, flags=re.IGNORECASE)
    for pattern, word in _STREET_RES:
        normalized = pattern.sub(word, normalized)
    normalized = re.sub(r"(\d+)\s*[#-]\s*(\d+)", r"\1 Unit \2", normalized)

    normalized = re.sub(r"\s+", " ", normalized).strip()
    normalized = re.sub(r"\s+,", ",", normalized)
    normalized = re.sub(r",\s*,", ",", normalized)
    return re.sub(r"[,.;]+$", "", normalized).strip()
