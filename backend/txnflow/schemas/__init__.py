"""
Pydantic schemas package.
"""

from txnflow.schemas.parsed_message import (
    Direction,
    Institution,
    Language,
    ParsedMessage,
)
from txnflow.schemas.transaction import (
    CATEGORIES,
    EDITABLE_FIELDS,
    OTHER_CATEGORY,
    Change,
    Severity,
    Suggestion,
    SuggestionKind,
    SuggestionSource,
    Transaction,
    TransactionListResponse,
    ValidationFinding,
)
from txnflow.schemas.edit_session import (
    EditResult,
    EditSession,
    PendingEdit,
    SessionError,
)
from txnflow.schemas.recurring import (
    AnalysisOptions,
    Frequency,
    HistoryEntry,
    PatternAnalysisResult,
    PatternSuggestion,
    Subscription,
    TransactionPattern,
)
from txnflow.schemas.automation import (
    IntakeRequest,
    ProcessingResult,
    Source,
    StatisticsSummary,
)

__all__ = [
    "Direction",
    "Institution",
    "Language",
    "ParsedMessage",
    "CATEGORIES",
    "EDITABLE_FIELDS",
    "OTHER_CATEGORY",
    "Change",
    "Severity",
    "Suggestion",
    "SuggestionKind",
    "SuggestionSource",
    "Transaction",
    "TransactionListResponse",
    "ValidationFinding",
    "EditResult",
    "EditSession",
    "PendingEdit",
    "SessionError",
    "AnalysisOptions",
    "Frequency",
    "HistoryEntry",
    "PatternAnalysisResult",
    "PatternSuggestion",
    "Subscription",
    "TransactionPattern",
    "IntakeRequest",
    "ProcessingResult",
    "Source",
    "StatisticsSummary",
]
