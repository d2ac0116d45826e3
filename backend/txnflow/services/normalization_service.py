"""
Converts parsed messages into canonical transactions.
"""

import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from txnflow.schemas.parsed_message import ParsedMessage
from txnflow.schemas.transaction import Transaction
from txnflow.services.categorization_service import CategoryTable

HIGH_CONFIDENCE = 0.8
LOW_CONFIDENCE = 0.5


def generate_tags(language: str, confidence: float, category: str, institution: str) -> List[str]:
    """Descriptive tags in a fixed order."""
    tags = [language]
    if confidence > HIGH_CONFIDENCE:
        tags.append("high-confidence")
    elif confidence < LOW_CONFIDENCE:
        tags.append("low-confidence")
    if category:
        tags.append(f"category:{category.lower()}")
    if institution:
        tags.append(f"institution:{institution.lower()}")
    return tags


class TransactionNormalizer:
    """Builds Transaction records from ParsedMessage results."""

    def __init__(
        self,
        categories: Optional[CategoryTable] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.categories = categories or CategoryTable()
        self.clock = clock
        self.id_factory = id_factory

    def normalize(
        self,
        parsed: ParsedMessage,
        provenance: Optional[Dict[str, Any]] = None,
    ) -> Transaction:
        category = self.categories.categorize(parsed.merchant or parsed.institution.value)

        payload = {"parsed": parsed.model_dump(mode="json")}
        if provenance:
            payload.update(provenance)

        return Transaction(
            id=self.id_factory(),
            amount=parsed.amount,
            institution=parsed.institution,
            merchant=parsed.merchant,
            direction=parsed.direction,
            timestamp=parsed.occurred_at or self.clock(),
            reference=parsed.reference,
            balance=parsed.balance,
            category=category,
            reason=parsed.reason,
            tags=generate_tags(
                parsed.language.value,
                parsed.confidence,
                category,
                parsed.institution.value,
            ),
            confidence=parsed.confidence,
            language=parsed.language,
            raw_text=parsed.raw_text,
            provenance=payload,
        )
