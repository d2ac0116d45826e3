"""
Database models package.
"""

from txnflow.models.transaction import Transaction
from txnflow.models.edit_session import EditSession
from txnflow.models.subscription import Subscription
from txnflow.models.processing_log import ProcessingLog

__all__ = [
    "Transaction",
    "EditSession",
    "Subscription",
    "ProcessingLog",
]
