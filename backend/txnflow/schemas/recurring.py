"""Pydantic schemas for recurring patterns and subscriptions."""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from txnflow.schemas.parsed_message import Direction, to_naive_utc


class Frequency(str, enum.Enum):
    """Recurring frequency enumeration."""
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"
    unknown = "unknown"


DEFAULT_FREQUENCY_BANDS: Dict[Frequency, Tuple[float, float]] = {
    Frequency.weekly: (6, 8),
    Frequency.monthly: (27, 33),
    Frequency.quarterly: (85, 100),
    Frequency.yearly: (360, 380),
}


class HistoryEntry(BaseModel):
    """One historical transaction as supplied to pattern analysis."""
    id: str
    amount: Decimal
    counterparty: Optional[str] = None
    institution: str
    timestamp: datetime
    direction: Direction = Direction.expense
    confidence: float = 1.0

    @field_validator("timestamp")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class AnalysisOptions(BaseModel):
    min_occurrences: int = Field(3, ge=1)
    confidence_threshold: float = 0.7
    lookback_days: int = Field(365, ge=0)
    max_amount_variance: float = 0.2
    max_interval_variance: float = 0.3
    min_pattern_confidence: float = 0.5
    frequency_bands: Dict[Frequency, Tuple[float, float]] = Field(
        default_factory=lambda: dict(DEFAULT_FREQUENCY_BANDS)
    )
    as_of: Optional[datetime] = None

    @field_validator("as_of")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @classmethod
    def from_settings(cls, settings) -> "AnalysisOptions":
        return cls(
            min_occurrences=settings.min_occurrences,
            confidence_threshold=settings.subscription_confidence_threshold,
            lookback_days=settings.lookback_days,
            max_amount_variance=settings.max_amount_variance,
            max_interval_variance=settings.max_interval_variance,
            min_pattern_confidence=settings.min_pattern_confidence,
        )


class TransactionPattern(BaseModel):
    """Statistically consistent group of transactions with one counterparty."""
    id: str
    counterparty: str
    average_amount: Decimal
    frequency: Frequency
    confidence: float
    occurrences: int
    first_date: date
    last_date: date
    next_expected_date: date
    average_interval: float
    interval_variance: float
    amount_variance: float
    transaction_ids: List[str] = Field(default_factory=list)


class Subscription(BaseModel):
    """Tracked recurring payment promoted from a pattern."""
    id: str
    name: str
    counterparty: str
    amount: Decimal
    frequency: Frequency
    next_billing_date: date
    category: str
    is_active: bool = True
    confidence: float
    source_transaction_ids: List[str] = Field(default_factory=list)
    created_at: datetime
    auto_renew: bool = True
    notes: Optional[str] = None


class PatternSuggestionType(str, enum.Enum):
    convert_to_subscription = "convert_to_subscription"
    review_pattern = "review_pattern"
    missing_transactions = "missing_transactions"


class PatternSuggestion(BaseModel):
    type: PatternSuggestionType
    title: str
    description: str
    priority: str
    action_required: bool
    related_pattern_id: Optional[str] = None


class PatternAnalysisResult(BaseModel):
    patterns: List[TransactionPattern]
    subscriptions: List[Subscription]
    suggestions: List[PatternSuggestion]
    confidence: float
    analysis_date: datetime


class AnalyzeRequest(BaseModel):
    """Request body for an analysis run; unset fields use configured defaults."""
    min_occurrences: Optional[int] = None
    confidence_threshold: Optional[float] = None
    lookback_days: Optional[int] = None
    as_of: Optional[datetime] = None
    persist: bool = False

    @field_validator("as_of")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)
