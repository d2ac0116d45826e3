"""
Text intake API endpoints.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from txnflow.dependencies import get_automation_service
from txnflow.schemas.automation import IntakeRequest, ProcessingResult, StatisticsSummary
from txnflow.services.automation_service import AutomationService

router = APIRouter(prefix="/intake", tags=["intake"])


@router.post("", response_model=ProcessingResult)
def process_text(
    data: IntakeRequest,
    service: AutomationService = Depends(get_automation_service)
):
    """Parse a message, clipboard text or manual entry into a transaction"""
    result = service.process(data.text, data.source)
    if not result.success:
        raise HTTPException(status_code=422, detail=result.error)
    return result


@router.get("/stats", response_model=StatisticsSummary)
def get_statistics(
    top_n: Optional[int] = Query(None, ge=1, le=100),
    service: AutomationService = Depends(get_automation_service)
):
    """Aggregate statistics over recent processing history"""
    return service.statistics(top_n)


@router.delete("/history")
def clear_history(service: AutomationService = Depends(get_automation_service)):
    """Clear the processing history"""
    service.clear_history()
    return {"status": "cleared"}
