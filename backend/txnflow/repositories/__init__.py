"""
Storage repositories package.
"""

from txnflow.repositories.base import (
    EditSessionRepository,
    ProcessingLogRepository,
    SubscriptionRepository,
    TransactionRepository,
)
from txnflow.repositories.memory import (
    InMemoryEditSessionRepository,
    InMemoryProcessingLogRepository,
    InMemorySubscriptionRepository,
    InMemoryTransactionRepository,
)
from txnflow.repositories.sql import (
    SqlEditSessionRepository,
    SqlProcessingLogRepository,
    SqlSubscriptionRepository,
    SqlTransactionRepository,
)

__all__ = [
    "EditSessionRepository",
    "ProcessingLogRepository",
    "SubscriptionRepository",
    "TransactionRepository",
    "InMemoryEditSessionRepository",
    "InMemoryProcessingLogRepository",
    "InMemorySubscriptionRepository",
    "InMemoryTransactionRepository",
    "SqlEditSessionRepository",
    "SqlProcessingLogRepository",
    "SqlSubscriptionRepository",
    "SqlTransactionRepository",
]
