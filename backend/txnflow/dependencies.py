"""
FastAPI dependencies.
"""

from functools import lru_cache
from typing import Generator
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from txnflow.config import settings
from txnflow.database import SessionLocal
from txnflow.parsers import ConfidenceScorer, ConfidenceWeights, GenericParser, MessageParser, TemplateBank
from txnflow.repositories import (
    SqlEditSessionRepository,
    SqlProcessingLogRepository,
    SqlSubscriptionRepository,
    SqlTransactionRepository,
)
from txnflow.schemas.parsed_message import Language
from txnflow.schemas.recurring import AnalysisOptions
from txnflow.services.automation_service import AutomationService
from txnflow.services.edit_session_service import EditSessionManager, SessionLockRegistry
from txnflow.services.recurring_service import PatternDetector
from txnflow.services.subscription_service import SubscriptionService
from txnflow.services.validation_service import Validator


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_template_bank() -> TemplateBank:
    """Compiled once per process."""
    return TemplateBank.from_config()


def get_message_parser() -> MessageParser:
    bank = get_template_bank()
    scorer = ConfidenceScorer(ConfidenceWeights.from_settings(settings))
    primary = Language(settings.primary_language)
    return MessageParser(
        bank=bank,
        scorer=scorer,
        primary_language=primary,
        fallback=GenericParser(bank=bank, scorer=scorer, primary_language=primary),
    )


def get_session_locks(request: Request) -> SessionLockRegistry:
    return request.app.state.session_locks


def get_transaction_repository(db: Session = Depends(get_db)) -> SqlTransactionRepository:
    return SqlTransactionRepository(db)


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(SqlSubscriptionRepository(db))


def get_automation_service(
    db: Session = Depends(get_db),
    parser: MessageParser = Depends(get_message_parser),
) -> AutomationService:
    return AutomationService(
        transactions=SqlTransactionRepository(db),
        log=SqlProcessingLogRepository(db, limit=settings.processing_log_limit),
        parser=parser,
        validator=Validator(settings.low_confidence_threshold),
        detector=PatternDetector(AnalysisOptions.from_settings(settings)),
        subscriptions=SubscriptionService(SqlSubscriptionRepository(db)),
        review_threshold=settings.review_confidence_threshold,
        allow_manual_fallback=settings.allow_manual_fallback,
        top_counterparties=settings.top_counterparties,
    )


def get_edit_session_manager(
    db: Session = Depends(get_db),
    locks: SessionLockRegistry = Depends(get_session_locks),
) -> EditSessionManager:
    return EditSessionManager(
        transactions=SqlTransactionRepository(db),
        sessions=SqlEditSessionRepository(db),
        validator=Validator(settings.low_confidence_threshold),
        locks=locks,
    )
