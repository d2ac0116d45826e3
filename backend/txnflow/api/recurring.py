"""API endpoints for recurring pattern analysis and subscriptions."""

from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from txnflow.dependencies import get_automation_service, get_subscription_service
from txnflow.errors import PatternNotFoundError, SubscriptionNotFoundError
from txnflow.schemas.recurring import (
    AnalysisOptions,
    AnalyzeRequest,
    PatternAnalysisResult,
    Subscription,
)
from txnflow.services.automation_service import AutomationService
from txnflow.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/recurring", tags=["recurring"])


def _options(service: AutomationService, data: AnalyzeRequest) -> AnalysisOptions:
    overrides = data.model_dump(exclude_none=True, exclude={"persist"})
    return service.detector.options.model_copy(update=overrides)


@router.post("/analyze", response_model=PatternAnalysisResult)
def analyze_patterns(
    data: Optional[AnalyzeRequest] = None,
    service: AutomationService = Depends(get_automation_service)
):
    """Detect recurring patterns in stored transactions."""
    data = data or AnalyzeRequest()
    return service.analyze_patterns(_options(service, data), persist=data.persist)


@router.post("/patterns/{pattern_id}/convert", response_model=Subscription)
def convert_pattern(
    pattern_id: str,
    data: Optional[AnalyzeRequest] = None,
    service: AutomationService = Depends(get_automation_service)
):
    """Track a detected pattern as a subscription regardless of its confidence."""
    data = data or AnalyzeRequest()
    try:
        return service.convert_pattern(pattern_id, _options(service, data))
    except PatternNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/subscriptions", response_model=List[Subscription])
def list_subscriptions(service: SubscriptionService = Depends(get_subscription_service)):
    """Get active subscriptions."""
    return service.list_active()


@router.post("/subscriptions/{subscription_id}/deactivate", response_model=Subscription)
def deactivate_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Stop tracking a subscription."""
    try:
        return service.deactivate(subscription_id)
    except SubscriptionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
