"""Tests for the in-memory and SQL repositories."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from txnflow.repositories import (
    InMemoryEditSessionRepository,
    InMemoryProcessingLogRepository,
    InMemorySubscriptionRepository,
    InMemoryTransactionRepository,
    SqlEditSessionRepository,
    SqlProcessingLogRepository,
    SqlSubscriptionRepository,
    SqlTransactionRepository,
)
from txnflow.schemas import (
    Change,
    EditSession,
    Frequency,
    ProcessingResult,
    Source,
    Subscription,
)

from conftest import FIXED_NOW, make_transaction


@pytest.fixture(params=["memory", "sql"])
def backend(request):
    return request.param


@pytest.fixture
def transactions(backend, db_session):
    if backend == "memory":
        return InMemoryTransactionRepository()
    return SqlTransactionRepository(db_session)


@pytest.fixture
def sessions(backend, db_session):
    if backend == "memory":
        return InMemoryEditSessionRepository()
    return SqlEditSessionRepository(db_session)


@pytest.fixture
def subscriptions(backend, db_session):
    if backend == "memory":
        return InMemorySubscriptionRepository()
    return SqlSubscriptionRepository(db_session)


def make_log(backend, db_session, limit):
    if backend == "memory":
        return InMemoryProcessingLogRepository(limit=limit)
    return SqlProcessingLogRepository(db_session, limit=limit)


def make_subscription(**overrides):
    data = dict(
        id="subscription_pattern_netflix_99.99",
        name="Netflix",
        counterparty="netflix",
        amount=Decimal("99.99"),
        frequency=Frequency.monthly,
        next_billing_date=date(2025, 7, 1),
        category="Entertainment",
        confidence=0.95,
        source_transaction_ids=["a", "b"],
        created_at=FIXED_NOW,
    )
    data.update(overrides)
    return Subscription(**data)


class TestTransactionRepository:
    """Test transaction storage."""

    def test_put_and_get(self, transactions):
        txn = make_transaction(
            merchant="Tomoca Coffee", tags=["en", "category:food"],
            provenance={"source": "message", "fingerprint": "abc"},
        )
        transactions.put(txn)

        stored = transactions.get(txn.id)
        assert stored.amount == Decimal("100.00")
        assert stored.merchant == "Tomoca Coffee"
        assert stored.tags == ["en", "category:food"]
        assert stored.provenance == {"source": "message", "fingerprint": "abc"}

    def test_get_missing(self, transactions):
        assert transactions.get("missing") is None

    def test_put_replaces(self, transactions):
        txn = make_transaction()
        transactions.put(txn)
        transactions.put(txn.model_copy(update={"category": "Food"}))

        assert transactions.get(txn.id).category == "Food"
        assert len(transactions.list_all()) == 1

    def test_list_all_ordered(self, transactions):
        later = make_transaction(id="b", timestamp=datetime(2025, 5, 2))
        earlier = make_transaction(id="a", timestamp=datetime(2025, 5, 1))
        transactions.put(later)
        transactions.put(earlier)

        assert [t.id for t in transactions.list_all()] == ["a", "b"]

    def test_find_by_fingerprint(self, transactions):
        txn = make_transaction(provenance={"fingerprint": "fp-1"})
        transactions.put(txn)

        assert transactions.find_by_fingerprint("fp-1").id == txn.id
        assert transactions.find_by_fingerprint("fp-2") is None


class TestEditSessionRepository:
    """Test edit session storage."""

    def test_changes_round_trip(self, sessions):
        session = EditSession(
            id="session_1", transaction_id="t1", user_id="u1", started_at=FIXED_NOW,
        )
        session.changes.append(Change(
            field="merchant", old_value=None, new_value="Kaldi", timestamp=FIXED_NOW,
        ))
        sessions.put(session)

        stored = sessions.get("session_1")
        assert stored.is_active
        assert [(c.field, c.new_value) for c in stored.changes] == [("merchant", "Kaldi")]

    def test_list_by_subject(self, sessions):
        for i, user in enumerate(["u1", "u2", "u1"]):
            sessions.put(EditSession(
                id=f"session_{i}", transaction_id="t1", user_id=user,
                started_at=FIXED_NOW + timedelta(minutes=i),
            ))
        sessions.put(EditSession(id="session_x", transaction_id="t2", user_id="u1", started_at=FIXED_NOW))

        assert [s.id for s in sessions.list_by_subject("t1", "u1")] == ["session_0", "session_2"]
        assert len(sessions.list_by_subject("t1")) == 3

    def test_close(self, sessions):
        session = EditSession(id="session_1", transaction_id="t1", user_id="u1", started_at=FIXED_NOW)
        sessions.put(session)
        sessions.put(session.model_copy(update={"is_active": False, "closed_at": FIXED_NOW}))

        assert not sessions.get("session_1").is_active


class TestSubscriptionRepository:
    """Test subscription storage."""

    def test_put_and_get(self, subscriptions):
        subscriptions.put(make_subscription())
        stored = subscriptions.get("subscription_pattern_netflix_99.99")

        assert stored.amount == Decimal("99.99")
        assert stored.frequency == Frequency.monthly
        assert stored.source_transaction_ids == ["a", "b"]

    def test_list_active(self, subscriptions):
        subscriptions.put(make_subscription())
        subscriptions.put(make_subscription(id="s2", name="Dstv", counterparty="dstv"))
        subscriptions.put(make_subscription(id="s3", name="Gym", counterparty="gym", is_active=False))

        assert [s.name for s in subscriptions.list_active()] == ["Dstv", "Netflix"]


class TestProcessingLogRepository:
    """Test the bounded processing log."""

    def result(self, n):
        return ProcessingResult(
            success=False, error=f"failure {n}", source=Source.message, processed_at=FIXED_NOW,
        )

    def test_newest_first_and_bounded(self, backend, db_session):
        log = make_log(backend, db_session, limit=3)
        for n in range(5):
            log.append(self.result(n))

        assert [r.error for r in log.list_recent()] == ["failure 4", "failure 3", "failure 2"]
        assert [r.error for r in log.list_recent(limit=1)] == ["failure 4"]

    def test_clear(self, backend, db_session):
        log = make_log(backend, db_session, limit=3)
        log.append(self.result(0))
        log.clear()

        assert log.list_recent() == []
