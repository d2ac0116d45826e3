"""
Subscription promotion and management.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from txnflow.errors import SubscriptionNotFoundError
from txnflow.repositories.base import SubscriptionRepository
from txnflow.schemas.recurring import Frequency, Subscription, TransactionPattern
from txnflow.schemas.transaction import OTHER_CATEGORY
from txnflow.services.recurring_service import calculate_next_expected

logger = logging.getLogger(__name__)


class KnownSubscription(NamedTuple):
    category: str
    frequency: Frequency


KNOWN_SUBSCRIPTIONS: Dict[str, KnownSubscription] = {
    # Streaming
    "netflix": KnownSubscription("Entertainment", Frequency.monthly),
    "spotify": KnownSubscription("Entertainment", Frequency.monthly),
    "youtube": KnownSubscription("Entertainment", Frequency.monthly),
    "dstv": KnownSubscription("Entertainment", Frequency.monthly),
    # Telecom
    "ethio telecom": KnownSubscription("Bills", Frequency.monthly),
    "ethiotelecom": KnownSubscription("Bills", Frequency.monthly),
    "safaricom": KnownSubscription("Bills", Frequency.monthly),
    # Utilities
    "electric": KnownSubscription("Bills", Frequency.monthly),
    "water": KnownSubscription("Bills", Frequency.monthly),
    "eelpa": KnownSubscription("Bills", Frequency.monthly),
    # Insurance
    "insurance": KnownSubscription("Insurance", Frequency.monthly),
    # Transport
    "uber": KnownSubscription("Transport", Frequency.weekly),
    "feres": KnownSubscription("Transport", Frequency.weekly),
    "zay": KnownSubscription("Transport", Frequency.weekly),
    # Schedule varies by plan
    "gym": KnownSubscription("Health", Frequency.unknown),
}

SECONDARY_CATEGORY_RULES: Sequence[Tuple[str, str]] = (
    (r"netflix|spotify|youtube|entertainment", "Entertainment"),
    (r"insurance", "Insurance"),
    (r"uber|feres|zay|transport", "Transport"),
    (r"telecom|phone|mobile", "Bills"),
)

_GENERIC_WORDS = re.compile(r"\b(bank|cbe|telebirr)\b", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def infer_category(counterparty: str) -> str:
    """Category from known subscription keywords, then the secondary rules."""
    lowered = counterparty.lower()
    for key, info in KNOWN_SUBSCRIPTIONS.items():
        if key in lowered:
            return info.category
    for pattern, category in SECONDARY_CATEGORY_RULES:
        if re.search(pattern, lowered):
            return category
    return OTHER_CATEGORY


def _title(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" ") if word)


def subscription_name(counterparty: str) -> str:
    """Display name: institution words removed, whitespace collapsed, title-cased."""
    stripped = _WHITESPACE.sub(" ", _GENERIC_WORDS.sub("", counterparty)).strip()
    return _title(stripped) or _title(counterparty.strip())


def subscription_notes(pattern: TransactionPattern) -> str:
    return (
        f"Auto-detected from {pattern.occurrences} transactions. "
        f"Average interval: {pattern.average_interval:.1f} days. "
        f"Confidence: {pattern.confidence * 100:.1f}%."
    )


class SubscriptionPromoter:
    """Turns confident patterns into Subscription records."""

    def __init__(
        self,
        known: Optional[Dict[str, KnownSubscription]] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.known = KNOWN_SUBSCRIPTIONS if known is None else known
        self.clock = clock

    def promote(
        self,
        patterns: List[TransactionPattern],
        confidence_threshold: float = 0.7,
    ) -> List[Subscription]:
        subscriptions = []
        for pattern in patterns:
            if pattern.confidence < confidence_threshold:
                continue
            subscriptions.append(self.promote_one(pattern))
        logger.info("Promoted %d of %d patterns", len(subscriptions), len(patterns))
        return subscriptions

    def promote_one(self, pattern: TransactionPattern) -> Subscription:
        info = self.known.get(pattern.counterparty)
        if info is not None:
            category = info.category
            frequency = info.frequency if info.frequency != Frequency.unknown else pattern.frequency
        else:
            category = infer_category(pattern.counterparty)
            frequency = pattern.frequency
        if frequency == Frequency.unknown:
            frequency = Frequency.monthly

        return Subscription(
            id=f"subscription_{pattern.id}",
            name=subscription_name(pattern.counterparty),
            counterparty=pattern.counterparty,
            amount=pattern.average_amount,
            frequency=frequency,
            next_billing_date=calculate_next_expected(pattern.last_date, frequency),
            category=category,
            is_active=True,
            confidence=pattern.confidence,
            source_transaction_ids=list(pattern.transaction_ids),
            created_at=self.clock(),
            auto_renew=True,
            notes=subscription_notes(pattern),
        )


class SubscriptionService:
    """Stores promoted subscriptions and handles deactivation."""

    def __init__(self, repository: SubscriptionRepository):
        self.repository = repository

    def save_all(self, subscriptions: List[Subscription]) -> List[Subscription]:
        """
        Upsert subscriptions by id.

        A re-detected subscription keeps its original creation time and a
        deactivated one stays deactivated.
        """
        saved = []
        for subscription in subscriptions:
            existing = self.repository.get(subscription.id)
            if existing is not None:
                subscription = subscription.model_copy(update={
                    "created_at": existing.created_at,
                    "is_active": existing.is_active,
                })
            saved.append(self.repository.put(subscription))
        return saved

    def list_active(self) -> List[Subscription]:
        return self.repository.list_active()

    def deactivate(self, subscription_id: str) -> Subscription:
        subscription = self.repository.get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)
        subscription = subscription.model_copy(update={"is_active": False})
        self.repository.put(subscription)
        logger.info("Deactivated subscription %s", subscription_id)
        return subscription
