"""
Script-based language detection.
"""

import re

from txnflow.schemas.parsed_message import Language


_ETHIOPIC = re.compile(r"[ሀ-፼]")
_LATIN = re.compile(r"[A-Za-z]")

# A script must appear more often than this to win outright
DEFAULT_MARGIN = 5


def count_scripts(text: str) -> tuple:
    """Return (ethiopic_count, latin_count) for the text."""
    return len(_ETHIOPIC.findall(text)), len(_LATIN.findall(text))


def detect_language(text: str, margin: int = DEFAULT_MARGIN) -> Language:
    """
    Classify text as English, Amharic or mixed.

    A script wins when it has more than ``margin`` characters and more
    characters than the other script. Everything else is mixed.
    """
    ethiopic, latin = count_scripts(text or "")
    if ethiopic > margin and ethiopic > latin:
        return Language.am
    if latin > margin and latin > ethiopic:
        return Language.en
    return Language.mixed


def other_language(language: Language) -> Language:
    """The other supported script; mixed has no counterpart."""
    if language == Language.en:
        return Language.am
    if language == Language.am:
        return Language.en
    return Language.mixed
