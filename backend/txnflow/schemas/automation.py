"""Schemas for text intake and processing statistics."""

import enum
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from txnflow.schemas.transaction import Transaction, ValidationFinding


class Source(str, enum.Enum):
    """Where a piece of text came from."""
    message = "message"
    clipboard = "clipboard"
    manual = "manual"


class IntakeRequest(BaseModel):
    text: str = Field(min_length=1)
    source: Source = Source.message


class ProcessingResult(BaseModel):
    """Outcome of processing one text."""
    success: bool
    transaction: Optional[Transaction] = None
    error: Optional[str] = None
    confidence: float = 0.0
    source: Source
    processing_time_ms: float = 0.0
    requires_review: bool = True
    findings: List[ValidationFinding] = Field(default_factory=list)
    duplicate_of: Optional[str] = None
    processed_at: datetime


class ConfidenceDistribution(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class CounterpartyCount(BaseModel):
    counterparty: str
    count: int


class StatisticsSummary(BaseModel):
    total_processed: int
    success_rate: float
    average_processing_time_ms: float
    source_breakdown: Dict[str, int]
    confidence_distribution: ConfidenceDistribution
    top_counterparties: List[CounterpartyCount]
