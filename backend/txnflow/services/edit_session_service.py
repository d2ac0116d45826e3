"""
Edit session workflow.

A session layers user changes over a stored transaction. After every change
the layered view is re-validated and suggestions are regenerated from
scratch. The stored transaction only changes when a save-ready edit is
finalized.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from pydantic import ValidationError

from txnflow.errors import InvalidFieldError, TransactionNotFoundError
from txnflow.parsers.primitives import normalize_amount, resolve_date
from txnflow.repositories.base import EditSessionRepository, TransactionRepository
from txnflow.schemas.edit_session import EditResult, EditSession, PendingEdit, SessionError
from txnflow.schemas.parsed_message import Direction, Institution
from txnflow.schemas.transaction import EDITABLE_FIELDS, Change, Transaction
from txnflow.services.suggestion_service import SuggestionEngine
from txnflow.services.validation_service import Validator

logger = logging.getLogger(__name__)

_DIRECTION_ALIASES = {
    "debit": Direction.expense,
    "credit": Direction.income,
}


class SessionLockRegistry:
    """One lock per session id, shared by every manager of an application."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(session_id, threading.Lock())

    def discard(self, session_id: str) -> None:
        with self._guard:
            self._locks.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        with self._guard:
            return session_id in self._locks


def _match_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if text in (member.value.lower(), member.name.lower()):
            return member
    return None


def coerce_value(field: str, value: Any) -> Any:
    """
    Convert an edited value to the field's type where possible.

    Values that cannot be converted are kept as given so validation can
    report them.
    """
    if field in ("amount", "balance"):
        if value is None or value == "":
            return None
        parsed = normalize_amount(value)
        return parsed if parsed is not None else value
    if field == "timestamp":
        resolved = resolve_date(value)
        return resolved if resolved is not None else value
    if field == "institution":
        return _match_enum(Institution, value) or Institution.unknown
    if field == "direction":
        if isinstance(value, str) and value.strip().lower() in _DIRECTION_ALIASES:
            return _DIRECTION_ALIASES[value.strip().lower()]
        return _match_enum(Direction, value) or value
    if field == "tags":
        if value is None:
            return []
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        return [str(t) for t in value]
    if field == "category":
        return str(value).strip() if value is not None else ""
    # Free-text fields
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def layer_changes(changes: Iterable[Change]) -> Dict[str, Any]:
    """Replay changes in order; later changes to a field win."""
    updated: Dict[str, Any] = {}
    for change in changes:
        updated[change.field] = coerce_value(change.field, change.new_value)
    return updated


class EditSessionManager:
    """Starts, edits, completes and closes edit sessions."""

    def __init__(
        self,
        transactions: TransactionRepository,
        sessions: EditSessionRepository,
        suggestions: Optional[SuggestionEngine] = None,
        validator: Optional[Validator] = None,
        locks: Optional[SessionLockRegistry] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.transactions = transactions
        self.sessions = sessions
        self.suggestions = suggestions or SuggestionEngine()
        self.validator = validator or Validator()
        self.locks = locks or SessionLockRegistry()
        self.clock = clock

    def start_session(self, transaction_id: str, user_id: str) -> EditSession:
        """Open a session, or return the user's active one for this transaction."""
        if self.transactions.get(transaction_id) is None:
            raise TransactionNotFoundError(transaction_id)

        for existing in self.sessions.list_by_subject(transaction_id, user_id):
            if existing.is_active:
                return existing

        session = EditSession(
            id=f"session_{uuid.uuid4().hex}",
            transaction_id=transaction_id,
            user_id=user_id,
            started_at=self.clock(),
        )
        self.sessions.put(session)
        logger.info("Started edit session %s for transaction %s", session.id, transaction_id)
        return session

    def apply_change(
        self,
        session_id: str,
        field: str,
        new_value: Any,
        reason: str = "User edit",
    ) -> EditResult:
        if field not in EDITABLE_FIELDS:
            raise InvalidFieldError(field)

        with self.locks.lock_for(session_id):
            session, original, failure = self._resolve(session_id, require_active=True)
            if failure:
                return failure

            current = original.model_copy(update=layer_changes(session.changes))
            session.changes.append(Change(
                field=field,
                old_value=getattr(current, field),
                new_value=coerce_value(field, new_value),
                reason=reason,
                timestamp=self.clock(),
            ))
            self.sessions.put(session)

            return EditResult.ok(self._build(session, original))

    def current_edit(self, session_id: str) -> EditResult:
        """Pending edit for a session as currently stored."""
        session, original, failure = self._resolve(session_id, require_active=False)
        if failure:
            return failure
        return EditResult.ok(self._build(session, original))

    def complete_transaction(
        self,
        pending_edit: PendingEdit,
        completion_fields: Dict[str, Any],
    ) -> PendingEdit:
        """
        Merge completion data over the pending edit.

        Suggestions are cleared since the user filled the record explicitly;
        findings are recomputed.
        """
        for field in completion_fields:
            if field not in EDITABLE_FIELDS:
                raise InvalidFieldError(field)

        updated = dict(pending_edit.updated_fields)
        for field, value in completion_fields.items():
            updated[field] = coerce_value(field, value)

        view = pending_edit.original.model_copy(update=updated)
        return pending_edit.model_copy(update={
            "updated_fields": updated,
            "user_edited": True,
            "suggestions": [],
            "findings": self.validator.validate(view),
            "last_modified": self.clock(),
        })

    def finalize_session(
        self,
        session_id: str,
        pending_edit: Optional[PendingEdit] = None,
    ) -> EditResult:
        """Persist a save-ready edit and close the session."""
        with self.locks.lock_for(session_id):
            session, original, failure = self._resolve(session_id, require_active=True)
            if failure:
                return failure

            edit = pending_edit or self._build(session, original)
            edit = edit.model_copy(update={"findings": self.validator.validate(edit.as_transaction())})
            if not edit.is_save_ready:
                logger.info("Refused to finalize session %s with blocking findings", session_id)
                return EditResult.failure(
                    SessionError.not_save_ready,
                    "Edit has error findings and cannot be saved",
                )

            try:
                final = Transaction.model_validate(edit.transaction)
            except ValidationError as e:
                return EditResult.failure(SessionError.not_save_ready, str(e))

            self.transactions.put(final)
            self._close(session)
            logger.info("Finalized edit session %s", session_id)
            return EditResult.ok(edit)

    def close_session(self, session_id: str) -> EditResult:
        """Abandon a session without saving."""
        with self.locks.lock_for(session_id):
            session = self.sessions.get(session_id)
            if session is None:
                return EditResult.failure(SessionError.session_not_found, f"Session {session_id} not found")
            if not session.is_active:
                return EditResult.failure(SessionError.session_inactive, f"Session {session_id} is closed")

            self._close(session)
            original = self.transactions.get(session.transaction_id)
            return EditResult(success=True, edit=self._build(session, original) if original else None)

    def _close(self, session: EditSession) -> None:
        session.is_active = False
        session.closed_at = self.clock()
        self.sessions.put(session)
        self.locks.discard(session.id)

    def _resolve(self, session_id: str, require_active: bool):
        session = self.sessions.get(session_id)
        if session is None:
            logger.debug("Edit session %s not found", session_id)
            return None, None, EditResult.failure(
                SessionError.session_not_found, f"Session {session_id} not found"
            )
        if require_active and not session.is_active:
            return session, None, EditResult.failure(
                SessionError.session_inactive, f"Session {session_id} is closed"
            )
        original = self.transactions.get(session.transaction_id)
        if original is None:
            return session, None, EditResult.failure(
                SessionError.transaction_not_found,
                f"Transaction {session.transaction_id} not found",
            )
        return session, original, None

    def _build(self, session: EditSession, original: Transaction) -> PendingEdit:
        updated = layer_changes(session.changes)
        view = original.model_copy(update=updated)
        return PendingEdit(
            id=f"edit_{session.id}",
            session_id=session.id,
            original=original,
            updated_fields=updated,
            changes=list(session.changes),
            user_edited=bool(session.changes),
            suggestions=self.suggestions.suggest(view),
            findings=self.validator.validate(view),
            last_modified=session.changes[-1].timestamp if session.changes else session.started_at,
        )
