"""
Helpers that run template lists against text.
"""

from decimal import Decimal
from typing import Iterable, Optional, Pattern

from txnflow.parsers.primitives import (
    clean_capture,
    looks_like_account_number,
    normalize_amount,
    resolve_date,
)

MIN_NARRATIVE_LENGTH = 3
MAX_NARRATIVE_LENGTH = 99


def first_match(patterns: Iterable[Pattern], text: str):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def first_capture(patterns: Iterable[Pattern], text: str) -> Optional[str]:
    match = first_match(patterns, text)
    if not match:
        return None
    return clean_capture(match.group(1))


def first_amount(patterns: Iterable[Pattern], text: str, positive: bool = True) -> Optional[Decimal]:
    """First capture across all matches that parses as an amount."""
    for pattern in patterns:
        for match in pattern.finditer(text):
            value = normalize_amount(match.group(1))
            if value is None:
                continue
            if positive and value <= 0:
                continue
            return value
    return None


def first_date(patterns: Iterable[Pattern], text: str):
    for pattern in patterns:
        for match in pattern.finditer(text):
            resolved = resolve_date(match.group(1))
            if resolved is not None:
                return resolved
    return None


def is_narrative(candidate: Optional[str]) -> bool:
    """Plausible merchant or reason text: bounded length, has letters, not an account."""
    if not candidate:
        return False
    if not MIN_NARRATIVE_LENGTH <= len(candidate) <= MAX_NARRATIVE_LENGTH:
        return False
    if not any(ch.isalpha() for ch in candidate):
        return False
    return not looks_like_account_number(candidate)


def first_narrative(patterns: Iterable[Pattern], text: str) -> Optional[str]:
    for pattern in patterns:
        for match in pattern.finditer(text):
            candidate = clean_capture(match.group(1))
            if is_narrative(candidate):
                return candidate
    return None
