"""
Deterministic confidence scoring for parsed messages.
"""

from pydantic import BaseModel, ConfigDict

from txnflow.schemas.parsed_message import Direction
from txnflow.stats import clamp


class ConfidenceWeights(BaseModel):
    """Score contributions and penalties, fixed for the life of a scorer."""

    model_config = ConfigDict(frozen=True)

    base: float = 0.5
    institution: float = 0.2
    amount: float = 0.2
    balance: float = 0.1
    reference: float = 0.1
    merchant: float = 0.1
    reason: float = 0.05
    transfer_penalty: float = 0.05
    alternate_script_penalty: float = 0.1
    fallback_penalty: float = 0.3

    @classmethod
    def from_settings(cls, settings) -> "ConfidenceWeights":
        return cls(
            alternate_script_penalty=settings.alternate_script_penalty,
            fallback_penalty=settings.fallback_penalty,
        )


class ConfidenceScorer:
    """Weighted sum over the fields that were extracted, clamped to [0, 1]."""

    def __init__(self, weights: ConfidenceWeights = None):
        self.weights = weights or ConfidenceWeights()

    def score(
        self,
        *,
        institution: bool,
        amount: bool,
        balance: bool = False,
        reference: bool = False,
        merchant: bool = False,
        reason: bool = False,
        direction: Direction = Direction.expense,
        alternate_script: bool = False,
        fallback: bool = False,
    ) -> float:
        w = self.weights
        score = w.base
        if institution:
            score += w.institution
        if amount:
            score += w.amount
        if balance:
            score += w.balance
        if reference:
            score += w.reference
        if merchant:
            score += w.merchant
        if reason:
            score += w.reason
        if direction == Direction.transfer:
            score -= w.transfer_penalty
        if alternate_script:
            score -= w.alternate_script_penalty
        if fallback:
            score -= w.fallback_penalty
        # Round away float noise so identical inputs compare equal
        return round(clamp(score), 4)
