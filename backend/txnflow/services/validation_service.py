"""
Validation rules for transactions.

Every rule produces zero or one finding and rules do not depend on each
other. Values are checked as stored, so a pending edit holding an
unparseable value is reported instead of raising.
"""

from typing import List, Optional

from txnflow.parsers.primitives import normalize_amount, resolve_date
from txnflow.schemas.parsed_message import Institution
from txnflow.schemas.transaction import Severity, Transaction, ValidationFinding


INVALID_AMOUNT = "INVALID_AMOUNT"
UNKNOWN_INSTITUTION = "UNKNOWN_INSTITUTION"
MISSING_CATEGORY = "MISSING_CATEGORY"
INVALID_DATE = "INVALID_DATE"
LOW_CONFIDENCE = "LOW_CONFIDENCE"

_KNOWN_INSTITUTIONS = {i.value for i in Institution if i != Institution.unknown}


class Validator:
    """Fixed rule set evaluated in full on every call."""

    def __init__(self, low_confidence_threshold: float = 0.5):
        self.low_confidence_threshold = low_confidence_threshold

    def validate(self, transaction: Transaction) -> List[ValidationFinding]:
        findings = []
        for rule in (
            self.check_amount,
            self.check_institution,
            self.check_category,
            self.check_date,
            self.check_confidence,
        ):
            finding = rule(transaction)
            if finding is not None:
                findings.append(finding)
        return findings

    def check_amount(self, transaction: Transaction) -> Optional[ValidationFinding]:
        amount = normalize_amount(transaction.amount)
        if amount is not None and amount > 0:
            return None
        return ValidationFinding(
            field="amount",
            message="Amount must be greater than zero",
            severity=Severity.error,
            code=INVALID_AMOUNT,
        )

    def check_institution(self, transaction: Transaction) -> Optional[ValidationFinding]:
        institution = getattr(transaction.institution, "value", transaction.institution)
        if institution in _KNOWN_INSTITUTIONS:
            return None
        return ValidationFinding(
            field="institution",
            message="Institution could not be identified",
            severity=Severity.warning,
            code=UNKNOWN_INSTITUTION,
        )

    def check_category(self, transaction: Transaction) -> Optional[ValidationFinding]:
        category = transaction.category
        if isinstance(category, str) and category.strip():
            return None
        return ValidationFinding(
            field="category",
            message="Category is required",
            severity=Severity.warning,
            code=MISSING_CATEGORY,
        )

    def check_date(self, transaction: Transaction) -> Optional[ValidationFinding]:
        if resolve_date(transaction.timestamp) is not None:
            return None
        return ValidationFinding(
            field="timestamp",
            message="Date is missing or not a valid calendar date",
            severity=Severity.error,
            code=INVALID_DATE,
        )

    def check_confidence(self, transaction: Transaction) -> Optional[ValidationFinding]:
        if transaction.confidence >= self.low_confidence_threshold:
            return None
        return ValidationFinding(
            field="confidence",
            message=f"Low extraction confidence ({transaction.confidence:.0%}), review recommended",
            severity=Severity.warning,
            code=LOW_CONFIDENCE,
        )
