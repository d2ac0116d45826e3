"""
Deduplication service for processed messages.
"""

import hashlib
from decimal import Decimal
from typing import Optional

from txnflow.parsers.primitives import clean_text
from txnflow.repositories.base import TransactionRepository
from txnflow.schemas.parsed_message import ParsedMessage
from txnflow.schemas.transaction import Transaction


def generate_message_fingerprint(
    raw_text: str,
    institution: str,
    amount: Decimal,
    reference: Optional[str] = None
) -> str:
    """
    Generate SHA256 fingerprint for duplicate detection.
    Uses text|institution|amount|reference
    """
    components = [
        clean_text(raw_text).lower(),
        str(institution).lower(),
        str(amount.normalize()) if isinstance(amount, Decimal) else str(amount),
        (reference or "").strip().lower(),
    ]
    combined = "|".join(components)
    return hashlib.sha256(combined.encode()).hexdigest()


def fingerprint_parsed(parsed: ParsedMessage) -> str:
    return generate_message_fingerprint(
        parsed.raw_text,
        parsed.institution.value,
        parsed.amount,
        parsed.reference,
    )


def find_duplicate(repository: TransactionRepository, fingerprint: str) -> Optional[Transaction]:
    """Return the earlier transaction with this fingerprint, if any"""
    return repository.find_by_fingerprint(fingerprint)
