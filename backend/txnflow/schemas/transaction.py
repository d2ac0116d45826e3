"""
Transaction schemas.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from txnflow.schemas.parsed_message import Direction, Institution, Language, to_naive_utc


OTHER_CATEGORY = "Other"

CATEGORIES = [
    "Food",
    "Groceries",
    "Transport",
    "Bills",
    "Entertainment",
    "Health",
    "Insurance",
    "Education",
    "Shopping",
    "Cash",
    "Religious",
    "Income",
    OTHER_CATEGORY,
]

# Fields a user may change through an edit session
EDITABLE_FIELDS = frozenset({
    "amount",
    "institution",
    "merchant",
    "direction",
    "timestamp",
    "reference",
    "balance",
    "category",
    "reason",
    "location",
    "tags",
    "notes",
})


class Transaction(BaseModel):
    """Canonical, categorized transaction record."""

    id: str
    amount: Decimal
    institution: Institution
    merchant: Optional[str] = None
    direction: Direction
    timestamp: Optional[datetime] = None
    reference: Optional[str] = None
    balance: Optional[Decimal] = None
    category: str = OTHER_CATEGORY
    reason: Optional[str] = None
    location: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    confidence: float
    language: Language = Language.en
    raw_text: str = ""
    provenance: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, value: List[str]) -> List[str]:
        seen = []
        for tag in value:
            if tag not in seen:
                seen.append(tag)
        return seen

    @field_validator("timestamp")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @property
    def counterparty(self) -> str:
        """Merchant when known, otherwise the institution name."""
        return self.merchant or self.institution.value


class Change(BaseModel):
    """One field edit inside an edit session."""
    field: str
    old_value: Any = None
    new_value: Any = None
    reason: str = "User edit"
    timestamp: datetime


class SuggestionKind(str, enum.Enum):
    category = "category"
    merchant = "merchant"
    reason = "reason"
    completion = "completion"
    validation = "validation"


class SuggestionSource(str, enum.Enum):
    rule_based = "rule_based"
    statistical = "statistical"


class Suggestion(BaseModel):
    """Proposed correction or completion for one transaction field."""
    kind: SuggestionKind
    field: str
    suggested_value: Any
    confidence: float
    source: SuggestionSource = SuggestionSource.rule_based
    description: str


class Severity(str, enum.Enum):
    error = "error"
    warning = "warning"
    info = "info"


class ValidationFinding(BaseModel):
    """Result of one validation rule."""
    field: str
    message: str
    severity: Severity
    code: str


class TransactionListResponse(BaseModel):
    items: List[Transaction]
    total: int
    page: int
    pages: int
