"""
Repository interfaces.

Services depend only on these; the in-memory implementations back tests and
single-process use, the SQL ones back the API.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from txnflow.schemas.automation import ProcessingResult
from txnflow.schemas.edit_session import EditSession
from txnflow.schemas.recurring import Subscription
from txnflow.schemas.transaction import Transaction


class TransactionRepository(ABC):

    @abstractmethod
    def get(self, transaction_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    def put(self, transaction: Transaction) -> Transaction:
        """Insert or replace by id."""
        pass

    @abstractmethod
    def list_all(self) -> List[Transaction]:
        """All transactions ordered by timestamp, then id."""
        pass

    @abstractmethod
    def find_by_fingerprint(self, fingerprint: str) -> Optional[Transaction]:
        """Earliest stored transaction whose provenance carries this fingerprint."""
        pass


class EditSessionRepository(ABC):

    @abstractmethod
    def get(self, session_id: str) -> Optional[EditSession]:
        pass

    @abstractmethod
    def put(self, session: EditSession) -> EditSession:
        pass

    @abstractmethod
    def list_by_subject(self, transaction_id: str, user_id: Optional[str] = None) -> List[EditSession]:
        """Sessions for a transaction, optionally for one user, oldest first."""
        pass


class SubscriptionRepository(ABC):

    @abstractmethod
    def get(self, subscription_id: str) -> Optional[Subscription]:
        pass

    @abstractmethod
    def put(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    def list_active(self) -> List[Subscription]:
        pass


class ProcessingLogRepository(ABC):
    """Bounded log of processing results, newest first."""

    def __init__(self, limit: int = 100):
        self.limit = limit

    @abstractmethod
    def append(self, result: ProcessingResult) -> None:
        pass

    @abstractmethod
    def list_recent(self, limit: Optional[int] = None) -> List[ProcessingResult]:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
