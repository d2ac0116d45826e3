"""
Parsed message schema and the enumerations shared by the extraction engine.
"""

import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Institution(str, enum.Enum):
    """Financial institutions with known message templates."""
    cbe = "CBE"
    telebirr = "Telebirr"
    dashen = "Dashen"
    awash = "Awash"
    nib = "NIB"
    lion = "Lion"
    zemen = "Zemen"
    cooperative = "Cooperative"
    unknown = "Unknown"


class Direction(str, enum.Enum):
    """Money flow from the account holder's point of view."""
    expense = "expense"
    income = "income"
    transfer = "transfer"


class Language(str, enum.Enum):
    """Script classification of a message."""
    en = "en"
    am = "am"
    mixed = "mixed"


class ParsedMessage(BaseModel):
    """Immutable result of running the extraction engine over one text."""

    model_config = ConfigDict(frozen=True)

    institution: Institution
    direction: Direction
    amount: Decimal = Field(gt=0)
    balance: Optional[Decimal] = None
    merchant: Optional[str] = None
    reference: Optional[str] = None
    reason: Optional[str] = None
    occurred_at: Optional[datetime] = None
    language: Language
    extraction_language: Language
    confidence: float
    raw_text: str
    is_fallback: bool = False

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("occurred_at")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)
