"""
Edit session API endpoints.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from txnflow.dependencies import get_edit_session_manager
from txnflow.errors import InvalidFieldError, TransactionNotFoundError
from txnflow.schemas.edit_session import (
    ChangeRequest,
    CompletionRequest,
    EditResult,
    EditSession,
    PendingEdit,
    SessionError,
    StartSessionRequest,
)
from txnflow.services.edit_session_service import EditSessionManager

router = APIRouter(prefix="/sessions", tags=["sessions"])

_STATUS_CODES = {
    SessionError.session_not_found: 404,
    SessionError.transaction_not_found: 404,
    SessionError.session_inactive: 409,
    SessionError.not_save_ready: 400,
}


def _unwrap(result: EditResult) -> PendingEdit:
    if not result.success:
        raise HTTPException(status_code=_STATUS_CODES[result.error], detail=result.message)
    return result.edit


@router.post("", response_model=EditSession)
def start_session(
    data: StartSessionRequest,
    manager: EditSessionManager = Depends(get_edit_session_manager)
):
    """Start editing a transaction, or resume the user's open session"""
    try:
        return manager.start_session(data.transaction_id, data.user_id)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{session_id}", response_model=PendingEdit)
def get_session_edit(
    session_id: str,
    manager: EditSessionManager = Depends(get_edit_session_manager)
):
    """Current pending edit with suggestions and validation findings"""
    return _unwrap(manager.current_edit(session_id))


@router.post("/{session_id}/changes", response_model=PendingEdit)
def apply_change(
    session_id: str,
    data: ChangeRequest,
    manager: EditSessionManager = Depends(get_edit_session_manager)
):
    """Apply one field change"""
    try:
        result = manager.apply_change(session_id, data.field, data.value, data.reason)
    except InvalidFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _unwrap(result)


@router.post("/{session_id}/complete", response_model=PendingEdit)
def complete_transaction(
    session_id: str,
    data: CompletionRequest,
    manager: EditSessionManager = Depends(get_edit_session_manager)
):
    """Preview the edit with completion fields merged in"""
    edit = _unwrap(manager.current_edit(session_id))
    try:
        return manager.complete_transaction(edit, data.fields)
    except InvalidFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{session_id}/finalize", response_model=PendingEdit)
def finalize_session(
    session_id: str,
    data: Optional[CompletionRequest] = None,
    manager: EditSessionManager = Depends(get_edit_session_manager)
):
    """Save the edited transaction and close the session"""
    edit = None
    if data and data.fields:
        edit = _unwrap(manager.current_edit(session_id))
        try:
            edit = manager.complete_transaction(edit, data.fields)
        except InvalidFieldError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return _unwrap(manager.finalize_session(session_id, edit))


@router.post("/{session_id}/close", response_model=EditResult)
def close_session(
    session_id: str,
    manager: EditSessionManager = Depends(get_edit_session_manager)
):
    """Abandon the session without saving"""
    result = manager.close_session(session_id)
    if not result.success:
        raise HTTPException(status_code=_STATUS_CODES[result.error], detail=result.message)
    return result
