"""
Exceptions raised by txnflow services.

Expected absences (unparseable text, skipped pattern groups, inactive edit
sessions) are returned as values. These exceptions cover caller misuse.
"""


class TxnflowError(Exception):
    """Base class for txnflow errors."""


class TransactionNotFoundError(TxnflowError):
    """Raised when a transaction id cannot be resolved."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class SessionNotFoundError(TxnflowError):
    """Raised when an edit session id cannot be resolved."""

    def __init__(self, session_id: str):
        super().__init__(f"Edit session {session_id} not found")
        self.session_id = session_id


class InvalidFieldError(TxnflowError):
    """Raised when an edit targets a field that is not editable."""

    def __init__(self, field: str):
        super().__init__(f"Field '{field}' cannot be edited")
        self.field = field


class SubscriptionNotFoundError(TxnflowError):
    """Raised when a subscription id cannot be resolved."""

    def __init__(self, subscription_id: str):
        super().__init__(f"Subscription {subscription_id} not found")
        self.subscription_id = subscription_id


class PatternNotFoundError(TxnflowError):
    """Raised when no detected pattern carries the requested id."""

    def __init__(self, pattern_id: str):
        super().__init__(f"Pattern {pattern_id} not found")
        self.pattern_id = pattern_id
