"""
Edit session schemas.
"""

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from txnflow.schemas.transaction import (
    Change,
    Severity,
    Suggestion,
    Transaction,
    ValidationFinding,
)


class EditSession(BaseModel):
    """A bounded sequence of edits by one user on one transaction."""
    id: str
    transaction_id: str
    user_id: str
    started_at: datetime
    is_active: bool = True
    changes: List[Change] = Field(default_factory=list)
    closed_at: Optional[datetime] = None


class PendingEdit(BaseModel):
    """Current state of an edit: the original record plus layered changes."""
    id: str
    session_id: Optional[str] = None
    original: Transaction
    updated_fields: Dict[str, Any] = Field(default_factory=dict)
    changes: List[Change] = Field(default_factory=list)
    user_edited: bool = False
    suggestions: List[Suggestion] = Field(default_factory=list)
    findings: List[ValidationFinding] = Field(default_factory=list)
    last_modified: datetime

    @computed_field
    @property
    def transaction(self) -> Dict[str, Any]:
        """
        The original transaction fields with every updated field applied.

        Kept loosely typed so an edit holding a value that does not fit its
        field (an amount of "abc") still serializes as entered.
        """
        return {**self.original.model_dump(), **self.updated_fields}

    def as_transaction(self) -> Transaction:
        """The edited record as a Transaction, without revalidation."""
        return self.original.model_copy(update=self.updated_fields)

    @computed_field
    @property
    def is_save_ready(self) -> bool:
        return not any(f.severity == Severity.error for f in self.findings)


class SessionError(str, enum.Enum):
    session_not_found = "session_not_found"
    session_inactive = "session_inactive"
    transaction_not_found = "transaction_not_found"
    not_save_ready = "not_save_ready"


class EditResult(BaseModel):
    """Outcome of a session operation: an edit, or an explicit failure."""
    success: bool
    edit: Optional[PendingEdit] = None
    error: Optional[SessionError] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, edit: PendingEdit) -> "EditResult":
        return cls(success=True, edit=edit)

    @classmethod
    def failure(cls, error: SessionError, message: str) -> "EditResult":
        return cls(success=False, error=error, message=message)


class StartSessionRequest(BaseModel):
    transaction_id: str
    user_id: str


class ChangeRequest(BaseModel):
    field: str
    value: Any = None
    reason: str = "User edit"


class CompletionRequest(BaseModel):
    fields: Dict[str, Any] = Field(default_factory=dict)
