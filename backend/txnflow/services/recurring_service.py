"""Service for recurring transaction detection."""

import calendar
import logging
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional

from txnflow.schemas.recurring import (
    AnalysisOptions,
    Frequency,
    HistoryEntry,
    PatternSuggestion,
    PatternSuggestionType,
    Subscription,
    TransactionPattern,
)
from txnflow.stats import clamp, coefficient_of_variation, mean

logger = logging.getLogger(__name__)

INTERVAL_WEIGHT = 0.3
AMOUNT_WEIGHT = 0.2
UNKNOWN_FREQUENCY_PENALTY = 0.3

_CENT = Decimal("0.01")
_WHITESPACE = re.compile(r"\s+")


def add_months(value: date, months: int) -> date:
    """Add months, clamping the day to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_next_expected(last_date: date, frequency: Frequency) -> date:
    """Calculate the next expected date based on frequency."""
    if frequency == Frequency.weekly:
        return last_date + timedelta(days=7)
    elif frequency == Frequency.quarterly:
        return add_months(last_date, 3)
    elif frequency == Frequency.yearly:
        # Feb 29 falls back to Feb 28 in non-leap years
        return add_months(last_date, 12)
    else:
        # Monthly, and the default for unknown
        return add_months(last_date, 1)


def normalize_counterparty(name: Optional[str]) -> str:
    """Grouping key: lowercased, trimmed, whitespace collapsed."""
    return _WHITESPACE.sub(" ", (name or "").strip().lower())


def classify_frequency(
    average_interval: float,
    interval_variance: float,
    options: AnalysisOptions,
) -> Frequency:
    """Map a mean day gap onto a frequency band."""
    if interval_variance > options.max_interval_variance:
        return Frequency.unknown
    for frequency, (low, high) in options.frequency_bands.items():
        if low <= average_interval <= high:
            return frequency
    return Frequency.unknown


def pattern_confidence(interval_variance: float, amount_variance: float, frequency: Frequency) -> float:
    confidence = 1.0
    confidence -= interval_variance * INTERVAL_WEIGHT
    confidence -= amount_variance * AMOUNT_WEIGHT
    if frequency == Frequency.unknown:
        confidence -= UNKNOWN_FREQUENCY_PENALTY
    return clamp(confidence)


class PatternDetector:
    """
    Groups a transaction history by counterparty and keeps the groups whose
    amounts and timing are consistent enough to be recurring.

    The history passed in is copied before analysis, so callers may keep
    appending to their own list while a run is in progress.
    """

    def __init__(
        self,
        options: Optional[AnalysisOptions] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.options = options or AnalysisOptions()
        self.clock = clock

    def detect(
        self,
        history: List[HistoryEntry],
        options: Optional[AnalysisOptions] = None,
    ) -> List[TransactionPattern]:
        options = options or self.options
        snapshot = list(history)

        as_of = options.as_of or self.clock()
        cutoff = as_of - timedelta(days=options.lookback_days)
        recent = [entry for entry in snapshot if entry.timestamp >= cutoff]

        groups: Dict[str, List[HistoryEntry]] = {}
        for entry in recent:
            key = normalize_counterparty(entry.counterparty or entry.institution)
            if key:
                groups.setdefault(key, []).append(entry)

        patterns = []
        for key in sorted(groups):
            entries = sorted(groups[key], key=lambda e: (e.timestamp, e.id))
            pattern = self._analyze_group(key, entries, options)
            if pattern is not None:
                patterns.append(pattern)
        return patterns

    def _analyze_group(
        self,
        key: str,
        entries: List[HistoryEntry],
        options: AnalysisOptions,
    ) -> Optional[TransactionPattern]:
        if len(entries) < options.min_occurrences or len(entries) < 2:
            return None

        amounts = [float(e.amount) for e in entries]
        amount_variance = coefficient_of_variation(amounts)
        if amount_variance > options.max_amount_variance:
            logger.debug("Skipping %s: amount variance %.3f", key, amount_variance)
            return None

        intervals = [
            (entries[i].timestamp - entries[i - 1].timestamp).days
            for i in range(1, len(entries))
        ]
        average_interval = mean(intervals)
        interval_variance = coefficient_of_variation(intervals)

        frequency = classify_frequency(average_interval, interval_variance, options)
        confidence = pattern_confidence(interval_variance, amount_variance, frequency)
        if confidence < options.min_pattern_confidence:
            logger.debug("Skipping %s: confidence %.3f", key, confidence)
            return None

        average_amount = (
            sum((Decimal(e.amount) for e in entries), Decimal("0")) / len(entries)
        ).quantize(_CENT, rounding=ROUND_HALF_UP)
        last_date = entries[-1].timestamp.date()

        return TransactionPattern(
            id=f"pattern_{key.replace(' ', '_')}_{average_amount:.2f}",
            counterparty=key,
            average_amount=average_amount,
            frequency=frequency,
            confidence=confidence,
            occurrences=len(entries),
            first_date=entries[0].timestamp.date(),
            last_date=last_date,
            next_expected_date=calculate_next_expected(last_date, frequency),
            average_interval=average_interval,
            interval_variance=interval_variance,
            amount_variance=amount_variance,
            transaction_ids=[e.id for e in entries],
        )


def generate_pattern_suggestions(
    patterns: List[TransactionPattern],
    subscriptions: List[Subscription],
) -> List[PatternSuggestion]:
    """Follow-up actions for detected patterns."""
    promoted = {s.counterparty for s in subscriptions}
    suggestions = []

    for pattern in patterns:
        if pattern.confidence > 0.8 and pattern.counterparty not in promoted:
            suggestions.append(PatternSuggestion(
                type=PatternSuggestionType.convert_to_subscription,
                title=f"Convert {pattern.counterparty} to subscription",
                description=(
                    f"Detected {pattern.occurrences} recurring payments to {pattern.counterparty} "
                    f"averaging ETB {pattern.average_amount:.2f}."
                ),
                priority="high",
                action_required=True,
                related_pattern_id=pattern.id,
            ))

    for pattern in patterns:
        if pattern.confidence < 0.6:
            suggestions.append(PatternSuggestion(
                type=PatternSuggestionType.review_pattern,
                title=f"Review pattern for {pattern.counterparty}",
                description=(
                    f"Pattern detected with {pattern.confidence * 100:.1f}% confidence. "
                    "Manual review recommended."
                ),
                priority="medium",
                action_required=True,
                related_pattern_id=pattern.id,
            ))

    for pattern in patterns:
        if pattern.frequency == Frequency.unknown:
            suggestions.append(PatternSuggestion(
                type=PatternSuggestionType.missing_transactions,
                title=f"Missing transactions for {pattern.counterparty}",
                description="Pattern unclear, transactions may be missing or the schedule is irregular.",
                priority="medium",
                action_required=False,
                related_pattern_id=pattern.id,
            ))

    return suggestions


def overall_confidence(patterns: List[TransactionPattern], subscriptions: List[Subscription]) -> float:
    """Mean of the pattern and subscription confidence averages; 0 without patterns."""
    if not patterns:
        return 0.0
    pattern_mean = mean([p.confidence for p in patterns])
    subscription_mean = (
        sum(s.confidence for s in subscriptions) / max(1, len(subscriptions))
    )
    return (pattern_mean + subscription_mean) / 2
