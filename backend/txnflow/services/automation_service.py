"""
Automation orchestrator: text in, transactions, patterns and statistics out.
"""

import logging
import time
from collections import Counter
from datetime import datetime
from typing import Callable, List, Optional

from txnflow.errors import PatternNotFoundError
from txnflow.parsers.message_parser import MessageParser
from txnflow.repositories.base import ProcessingLogRepository, TransactionRepository
from txnflow.schemas.automation import (
    ConfidenceDistribution,
    CounterpartyCount,
    ProcessingResult,
    Source,
    StatisticsSummary,
)
from txnflow.schemas.recurring import (
    AnalysisOptions,
    HistoryEntry,
    PatternAnalysisResult,
    Subscription,
)
from txnflow.schemas.transaction import Severity
from txnflow.services.deduplication_service import find_duplicate, fingerprint_parsed
from txnflow.services.normalization_service import TransactionNormalizer
from txnflow.services.recurring_service import (
    PatternDetector,
    generate_pattern_suggestions,
    overall_confidence,
)
from txnflow.services.subscription_service import SubscriptionPromoter, SubscriptionService
from txnflow.services.validation_service import Validator
from txnflow.stats import mean

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5


class AutomationService:
    """Coordinates parsing, normalization, history and analysis."""

    def __init__(
        self,
        transactions: TransactionRepository,
        log: ProcessingLogRepository,
        parser: Optional[MessageParser] = None,
        normalizer: Optional[TransactionNormalizer] = None,
        validator: Optional[Validator] = None,
        detector: Optional[PatternDetector] = None,
        promoter: Optional[SubscriptionPromoter] = None,
        subscriptions: Optional[SubscriptionService] = None,
        review_threshold: float = 0.7,
        allow_manual_fallback: bool = True,
        top_counterparties: int = 10,
        clock: Callable[[], datetime] = datetime.utcnow,
        timer: Callable[[], float] = time.perf_counter,
    ):
        self.transactions = transactions
        self.log = log
        self.parser = parser or MessageParser()
        self.normalizer = normalizer or TransactionNormalizer(clock=clock)
        self.validator = validator or Validator()
        self.detector = detector or PatternDetector(clock=clock)
        self.promoter = promoter or SubscriptionPromoter(clock=clock)
        self.subscriptions = subscriptions
        self.review_threshold = review_threshold
        self.allow_manual_fallback = allow_manual_fallback
        self.top_counterparties = top_counterparties
        self.clock = clock
        self.timer = timer

    def process(self, text: str, source: Source = Source.message) -> ProcessingResult:
        """Parse one text, store the transaction and log the outcome."""
        source = Source(source)
        started = self.timer()
        allow_fallback = source == Source.manual and self.allow_manual_fallback

        parsed = self.parser.parse(text, allow_fallback=allow_fallback)
        if parsed is None:
            result = ProcessingResult(
                success=False,
                error="No transaction could be extracted from the text",
                source=source,
                processing_time_ms=self._elapsed_ms(started),
                requires_review=False,
                processed_at=self.clock(),
            )
            logger.info("No transaction found in %s text", source.value)
            self.log.append(result)
            return result

        fingerprint = fingerprint_parsed(parsed)
        duplicate = find_duplicate(self.transactions, fingerprint)
        transaction = self.normalizer.normalize(
            parsed,
            provenance={"source": source.value, "fingerprint": fingerprint},
        )
        self.transactions.put(transaction)

        findings = self.validator.validate(transaction)
        requires_review = (
            transaction.confidence < self.review_threshold
            or any(f.severity == Severity.error for f in findings)
        )
        result = ProcessingResult(
            success=True,
            transaction=transaction,
            confidence=transaction.confidence,
            source=source,
            processing_time_ms=self._elapsed_ms(started),
            requires_review=requires_review,
            findings=findings,
            duplicate_of=duplicate.id if duplicate else None,
            processed_at=self.clock(),
        )
        if duplicate:
            logger.info("Transaction %s repeats %s", transaction.id, duplicate.id)
        self.log.append(result)
        return result

    def process_message(self, text: str) -> ProcessingResult:
        return self.process(text, Source.message)

    def process_clipboard(self, text: str) -> ProcessingResult:
        return self.process(text, Source.clipboard)

    def process_manual(self, text: str) -> ProcessingResult:
        return self.process(text, Source.manual)

    def history(self) -> List[HistoryEntry]:
        """Stored transactions in the shape pattern analysis consumes."""
        return [
            HistoryEntry(
                id=t.id,
                amount=t.amount,
                counterparty=t.merchant,
                institution=t.institution.value,
                timestamp=t.timestamp,
                direction=t.direction,
                confidence=t.confidence,
            )
            for t in self.transactions.list_all()
            if t.timestamp is not None
        ]

    def analyze_patterns(
        self,
        options: Optional[AnalysisOptions] = None,
        history: Optional[List[HistoryEntry]] = None,
        persist: bool = False,
    ) -> PatternAnalysisResult:
        """
        Detect patterns and promote subscriptions.

        Runs over a snapshot of the history taken at call time. With
        ``persist`` the promoted subscriptions are stored.
        """
        options = options or self.detector.options
        snapshot = list(history) if history is not None else self.history()

        patterns = self.detector.detect(snapshot, options)
        subscriptions = self.promoter.promote(patterns, options.confidence_threshold)
        if persist and self.subscriptions is not None:
            subscriptions = self.subscriptions.save_all(subscriptions)

        return PatternAnalysisResult(
            patterns=patterns,
            subscriptions=subscriptions,
            suggestions=generate_pattern_suggestions(patterns, subscriptions),
            confidence=overall_confidence(patterns, subscriptions),
            analysis_date=self.clock(),
        )

    def convert_pattern(
        self,
        pattern_id: str,
        options: Optional[AnalysisOptions] = None,
        history: Optional[List[HistoryEntry]] = None,
    ) -> Subscription:
        """
        Promote one detected pattern to a subscription on request.

        The pattern is re-detected from current history, so the id must
        still match. The confidence threshold does not apply here.
        """
        options = options or self.detector.options
        snapshot = list(history) if history is not None else self.history()

        for pattern in self.detector.detect(snapshot, options):
            if pattern.id == pattern_id:
                break
        else:
            raise PatternNotFoundError(pattern_id)

        subscription = self.promoter.promote_one(pattern)
        if self.subscriptions is not None:
            subscription = self.subscriptions.save_all([subscription])[0]
        logger.info("Converted pattern %s to subscription %s", pattern_id, subscription.id)
        return subscription

    def statistics(self, top_n: Optional[int] = None) -> StatisticsSummary:
        """Read-only aggregation over the processing log."""
        top_n = self.top_counterparties if top_n is None else top_n
        results = self.log.list_recent()
        successes = [r for r in results if r.success and r.transaction is not None]

        distribution = ConfidenceDistribution()
        for r in successes:
            if r.confidence >= HIGH_CONFIDENCE:
                distribution.high += 1
            elif r.confidence >= MEDIUM_CONFIDENCE:
                distribution.medium += 1
            else:
                distribution.low += 1

        breakdown = {s.value: 0 for s in Source}
        for r in results:
            breakdown[r.source.value] += 1

        counts = Counter(r.transaction.counterparty for r in successes)
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:top_n]

        return StatisticsSummary(
            total_processed=len(results),
            success_rate=(len(successes) / len(results) * 100) if results else 0.0,
            average_processing_time_ms=mean([r.processing_time_ms for r in results]),
            source_breakdown=breakdown,
            confidence_distribution=distribution,
            top_counterparties=[CounterpartyCount(counterparty=c, count=n) for c, n in ranked],
        )

    def clear_history(self) -> None:
        self.log.clear()
        logger.info("Cleared processing history")

    def _elapsed_ms(self, started: float) -> float:
        return round((self.timer() - started) * 1000, 3)
