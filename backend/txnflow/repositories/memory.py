"""
In-memory repositories.
"""

import threading
from typing import Dict, List, Optional

from txnflow.repositories.base import (
    EditSessionRepository,
    ProcessingLogRepository,
    SubscriptionRepository,
    TransactionRepository,
)
from txnflow.schemas.automation import ProcessingResult
from txnflow.schemas.edit_session import EditSession
from txnflow.schemas.recurring import Subscription
from txnflow.schemas.transaction import Transaction


class InMemoryTransactionRepository(TransactionRepository):

    def __init__(self):
        self._items: Dict[str, Transaction] = {}

    def get(self, transaction_id: str) -> Optional[Transaction]:
        item = self._items.get(transaction_id)
        return item.model_copy(deep=True) if item else None

    def put(self, transaction: Transaction) -> Transaction:
        self._items[transaction.id] = transaction.model_copy(deep=True)
        return transaction

    def list_all(self) -> List[Transaction]:
        items = sorted(
            self._items.values(),
            key=lambda t: (t.timestamp is not None, t.timestamp or 0, t.id),
        )
        return [t.model_copy(deep=True) for t in items]

    def find_by_fingerprint(self, fingerprint: str) -> Optional[Transaction]:
        for item in self.list_all():
            if item.provenance.get("fingerprint") == fingerprint:
                return item
        return None


class InMemoryEditSessionRepository(EditSessionRepository):

    def __init__(self):
        self._items: Dict[str, EditSession] = {}

    def get(self, session_id: str) -> Optional[EditSession]:
        item = self._items.get(session_id)
        return item.model_copy(deep=True) if item else None

    def put(self, session: EditSession) -> EditSession:
        self._items[session.id] = session.model_copy(deep=True)
        return session

    def list_by_subject(self, transaction_id: str, user_id: Optional[str] = None) -> List[EditSession]:
        matches = [
            s for s in self._items.values()
            if s.transaction_id == transaction_id and (user_id is None or s.user_id == user_id)
        ]
        matches.sort(key=lambda s: (s.started_at, s.id))
        return [s.model_copy(deep=True) for s in matches]


class InMemorySubscriptionRepository(SubscriptionRepository):

    def __init__(self):
        self._items: Dict[str, Subscription] = {}

    def get(self, subscription_id: str) -> Optional[Subscription]:
        item = self._items.get(subscription_id)
        return item.model_copy(deep=True) if item else None

    def put(self, subscription: Subscription) -> Subscription:
        self._items[subscription.id] = subscription.model_copy(deep=True)
        return subscription

    def list_active(self) -> List[Subscription]:
        active = [s for s in self._items.values() if s.is_active]
        active.sort(key=lambda s: s.name)
        return [s.model_copy(deep=True) for s in active]


class InMemoryProcessingLogRepository(ProcessingLogRepository):

    def __init__(self, limit: int = 100):
        super().__init__(limit)
        self._items: List[ProcessingResult] = []
        self._lock = threading.Lock()

    def append(self, result: ProcessingResult) -> None:
        with self._lock:
            self._items.insert(0, result)
            del self._items[self.limit:]

    def list_recent(self, limit: Optional[int] = None) -> List[ProcessingResult]:
        with self._lock:
            items = list(self._items)
        return items if limit is None else items[:limit]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
