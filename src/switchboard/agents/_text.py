"""Lightweight text extraction used by the domain agents.

Regex heuristics only; anything smarter goes through the completion
service via ``Agent.analyze_intent``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# Words that end a place name ("to the airport by 5pm" -> "airport").
_STOP = r"(?=$|[,.!?;]|\s+(?:to|from|at|in|near|by|around|for|tomorrow|today|tonight|now|please)\b)"
_PLACE = r"(?:the\s+)?([A-Za-z][A-Za-z ]*?)"

_PICKUP_RE = re.compile(rf"\bfrom\s+{_PLACE}{_STOP}", re.IGNORECASE)
_NEAR_RE = re.compile(rf"\b(?:at|in|near)\s+{_PLACE}{_STOP}", re.IGNORECASE)
_DESTINATION_RE = re.compile(
    rf"\b(?:going to|take me to|drop me at|destination|to)\s+{_PLACE}{_STOP}",
    re.IGNORECASE,
)

_TIME_PATTERNS = (
    re.compile(r"\b(?:at|by|around)\s+(\d{1,2}:\d{2}(?:\s*[ap]m)?)", re.IGNORECASE),
    re.compile(r"\b(?:at|by|around)\s+(\d{1,2}\s*[ap]m)\b", re.IGNORECASE),
    re.compile(r"\b(tomorrow|today|tonight|morning|afternoon|evening)\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,2}:\d{2})\b"),
)

_PRICE_PATTERNS = (
    re.compile(r"₹\s*(\d+(?:,\d+)*(?:\.\d{1,2})?)"),
    re.compile(
        r"\b(?:under|below|less than|within)\s*(?:₹|rs\.?)?\s*(\d+(?:,\d+)*)", re.IGNORECASE
    ),
    re.compile(r"\bbudget\s*of\s*(?:₹|rs\.?)?\s*(\d+(?:,\d+)*)", re.IGNORECASE),
)

_NUMBER_RE = re.compile(r"\b(\d+)\b")


def keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    """Compile *keywords* into one case-insensitive word-prefix pattern.

    Matching on a word start keeps "book" matching "booking" while "ola"
    no longer matches "chocolate".
    """
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})", re.IGNORECASE)


def _clean(value: str) -> str | None:
    value = " ".join(value.split())
    return value or None


def extract_pickup(message: str) -> str | None:
    match = _PICKUP_RE.search(message)
    return _clean(match.group(1)) if match else None


def extract_location(message: str) -> str | None:
    """Return a place the user is at or starting from."""
    pickup = extract_pickup(message)
    if pickup:
        return pickup
    match = _NEAR_RE.search(message)
    return _clean(match.group(1)) if match else None


def extract_destination(message: str) -> str | None:
    # Last match wins: "I want to go to the airport" -> "airport".
    matches = list(_DESTINATION_RE.finditer(message))
    return _clean(matches[-1].group(1)) if matches else None


def extract_time(message: str) -> str | None:
    for pattern in _TIME_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def extract_price(message: str) -> int | None:
    """Return a budget or amount mentioned in *message*, in whole rupees."""
    for pattern in _PRICE_PATTERNS:
        match = pattern.search(message)
        if match:
            return int(float(match.group(1).replace(",", "")))
    return None


def extract_number(message: str) -> int | None:
    match = _NUMBER_RE.search(message)
    return int(match.group(1)) if match else None
