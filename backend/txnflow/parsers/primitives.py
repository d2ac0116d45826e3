"""
Field-extraction primitives: amount normalization, date resolution and text cleanup.
"""

import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from txnflow.schemas.parsed_message import to_naive_utc


# Ethiopic numerals mapped to their Arabic-digit spelling. Ethiopic numerals
# are additive rather than positional, so only this finite table is supported.
ETHIOPIC_NUMERALS = {
    "፩": "1",
    "፪": "2",
    "፫": "3",
    "፬": "4",
    "፭": "5",
    "፮": "6",
    "፯": "7",
    "፰": "8",
    "፱": "9",
    "፲": "10",
}

_NUMERAL_TABLE = str.maketrans(ETHIOPIC_NUMERALS)

_ZERO_WIDTH = re.compile(r"[\u200b-\u200d\ufeff]")
_WHITESPACE = re.compile(r"\s+")
_CURRENCY_WORDS = re.compile(r"(?i)\b(?:etb|birr)\b|ብር")
_MASKED_ACCOUNT = re.compile(r"\*{2,}|\bA/?C\b|^\+?\d[\d\s*-]{5,}$", re.IGNORECASE)
_TRAILING_PUNCT = " \t,;:-።"

DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
]


def clean_text(text: str) -> str:
    """Normalize unicode, drop zero-width characters and collapse whitespace."""
    if not text:
        return ""
    normalized = unicodedata.normalize("NFC", text)
    normalized = _ZERO_WIDTH.sub("", normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def translate_numerals(value: str) -> str:
    """Replace Ethiopic numeral symbols with Arabic digits."""
    return value.translate(_NUMERAL_TABLE)


def normalize_amount(raw: Any) -> Optional[Decimal]:
    """
    Parse an amount string into a Decimal.

    Handles thousands separators in both conventions ("1,500.00" and
    "1.500,00"), currency words and the Ethiopic numeral table. Returns None
    when the value cannot be parsed. Sign is preserved; callers decide whether
    non-positive values are acceptable.
    """
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = Decimal(str(raw))
        return value if value.is_finite() else None

    text = translate_numerals(str(raw))
    text = _CURRENCY_WORDS.sub("", text)
    text = text.replace("\u00a0", "").replace(" ", "").strip()
    if not text:
        return None

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        head, _, tail = text.rpartition(",")
        if text.count(",") == 1 and len(tail) in (1, 2):
            text = f"{head}.{tail}"
        else:
            text = text.replace(",", "")
    elif text.count(".") > 1:
        text = text.replace(".", "")

    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def resolve_date(value: Any) -> Optional[datetime]:
    """
    Resolve a value to a datetime.

    Accepts datetimes, dates and strings in ISO or the common message
    formats in DATE_FORMATS. Offset-aware values, including a trailing
    "Z", come back as naive UTC. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def clean_capture(value: Optional[str]) -> Optional[str]:
    """Trim a regex capture and strip trailing punctuation."""
    if value is None:
        return None
    cleaned = _WHITESPACE.sub(" ", value).strip().strip(_TRAILING_PUNCT).strip()
    return cleaned or None


def looks_like_account_number(value: str) -> bool:
    """True for masked account numbers such as 'A/C ****1234'."""
    return bool(_MASKED_ACCOUNT.search(value.strip()))
