"""Shared test fixtures."""

import os

# Keep the application engine off the filesystem during tests
os.environ.setdefault("TXNFLOW_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import datetime, timedelta
from decimal import Decimal
import uuid

import txnflow.models  # noqa: F401
from txnflow.database import Base
from txnflow.dependencies import get_db
from txnflow.main import app
from txnflow.parsers import TemplateBank
from txnflow.repositories import (
    InMemoryEditSessionRepository,
    InMemoryProcessingLogRepository,
    InMemorySubscriptionRepository,
    InMemoryTransactionRepository,
    SqlTransactionRepository,
)
from txnflow.schemas import Direction, Institution, Language, Transaction
from txnflow.schemas.recurring import HistoryEntry


SCENARIO_DEBIT = "Debit: ETB 1,500.00 from A/C ****1234. Ref: TXN123. Bal: ETB 45,000.00"

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def template_bank():
    """Default template bank, compiled once."""
    return TemplateBank.from_config()


@pytest.fixture
def transaction_repo():
    return InMemoryTransactionRepository()


@pytest.fixture
def session_repo():
    return InMemoryEditSessionRepository()


@pytest.fixture
def subscription_repo():
    return InMemorySubscriptionRepository()


@pytest.fixture
def log_repo():
    return InMemoryProcessingLogRepository(limit=100)


def make_transaction(**overrides) -> Transaction:
    """Build a transaction with sensible defaults."""
    data = dict(
        id=str(uuid.uuid4()),
        amount=Decimal("100.00"),
        institution=Institution.cbe,
        merchant=None,
        direction=Direction.expense,
        timestamp=datetime(2025, 5, 20, 9, 30),
        category="Other",
        confidence=0.9,
        language=Language.en,
        raw_text="Debit: ETB 100.00",
    )
    data.update(overrides)
    return Transaction(**data)


@pytest.fixture
def sample_transaction(transaction_repo):
    """A stored transaction in the in-memory repository."""
    txn = make_transaction()
    transaction_repo.put(txn)
    return txn


@pytest.fixture
def stored_transaction(db_session):
    """A stored transaction in the SQL repository."""
    txn = make_transaction(merchant="Tomoca Coffee")
    SqlTransactionRepository(db_session).put(txn)
    return txn


def monthly_history(counterparty: str, amounts, start: datetime, gaps, institution: str = "CBE"):
    """History entries starting at `start`, separated by the given day gaps."""
    entries = []
    when = start
    for i, amount in enumerate(amounts):
        if i > 0:
            when = when + timedelta(days=gaps[i - 1])
        entries.append(HistoryEntry(
            id=f"{counterparty.replace(' ', '-')}-{i}",
            amount=Decimal(str(amount)),
            counterparty=counterparty,
            institution=institution,
            timestamp=when,
        ))
    return entries
