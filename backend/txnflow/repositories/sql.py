"""
SQLAlchemy-backed repositories.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from txnflow.models.edit_session import EditSession as EditSessionModel
from txnflow.models.processing_log import ProcessingLog
from txnflow.models.subscription import Subscription as SubscriptionModel
from txnflow.models.transaction import Transaction as TransactionModel
from txnflow.repositories.base import (
    EditSessionRepository,
    ProcessingLogRepository,
    SubscriptionRepository,
    TransactionRepository,
)
from txnflow.schemas.automation import ProcessingResult
from txnflow.schemas.edit_session import EditSession
from txnflow.schemas.recurring import Subscription
from txnflow.schemas.transaction import Transaction


class SqlTransactionRepository(TransactionRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, transaction_id: str) -> Optional[Transaction]:
        row = self.db.query(TransactionModel).filter(TransactionModel.id == transaction_id).first()
        return Transaction.model_validate(row, from_attributes=True) if row else None

    def put(self, transaction: Transaction) -> Transaction:
        row = self.db.query(TransactionModel).filter(TransactionModel.id == transaction.id).first()
        if row is None:
            row = TransactionModel(id=transaction.id)
            self.db.add(row)

        data = transaction.model_dump()
        for field in (
            "amount", "institution", "merchant", "direction", "timestamp",
            "reference", "balance", "category", "reason", "location",
            "tags", "notes", "confidence", "language", "raw_text",
        ):
            setattr(row, field, data[field])
        row.provenance = transaction.model_dump(mode="json")["provenance"]
        row.fingerprint = transaction.provenance.get("fingerprint")

        self.db.commit()
        return transaction

    def list_all(self) -> List[Transaction]:
        rows = self.db.query(TransactionModel).order_by(
            TransactionModel.timestamp, TransactionModel.id
        ).all()
        return [Transaction.model_validate(r, from_attributes=True) for r in rows]

    def find_by_fingerprint(self, fingerprint: str) -> Optional[Transaction]:
        row = self.db.query(TransactionModel).filter(
            TransactionModel.fingerprint == fingerprint
        ).order_by(TransactionModel.created_at, TransactionModel.id).first()
        return Transaction.model_validate(row, from_attributes=True) if row else None


class SqlEditSessionRepository(EditSessionRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, session_id: str) -> Optional[EditSession]:
        row = self.db.query(EditSessionModel).filter(EditSessionModel.id == session_id).first()
        return EditSession.model_validate(row, from_attributes=True) if row else None

    def put(self, session: EditSession) -> EditSession:
        row = self.db.query(EditSessionModel).filter(EditSessionModel.id == session.id).first()
        if row is None:
            row = EditSessionModel(id=session.id)
            self.db.add(row)

        row.transaction_id = session.transaction_id
        row.user_id = session.user_id
        row.started_at = session.started_at
        row.is_active = session.is_active
        row.closed_at = session.closed_at
        # Reassign so the JSON column is flagged dirty
        row.changes = [c.model_dump(mode="json") for c in session.changes]

        self.db.commit()
        return session

    def list_by_subject(self, transaction_id: str, user_id: Optional[str] = None) -> List[EditSession]:
        query = self.db.query(EditSessionModel).filter(EditSessionModel.transaction_id == transaction_id)
        if user_id is not None:
            query = query.filter(EditSessionModel.user_id == user_id)
        rows = query.order_by(EditSessionModel.started_at, EditSessionModel.id).all()
        return [EditSession.model_validate(r, from_attributes=True) for r in rows]


class SqlSubscriptionRepository(SubscriptionRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, subscription_id: str) -> Optional[Subscription]:
        row = self.db.query(SubscriptionModel).filter(SubscriptionModel.id == subscription_id).first()
        return Subscription.model_validate(row, from_attributes=True) if row else None

    def put(self, subscription: Subscription) -> Subscription:
        row = self.db.query(SubscriptionModel).filter(SubscriptionModel.id == subscription.id).first()
        if row is None:
            row = SubscriptionModel(id=subscription.id)
            self.db.add(row)

        data = subscription.model_dump()
        for field, value in data.items():
            if field != "id":
                setattr(row, field, value)

        self.db.commit()
        return subscription

    def list_active(self) -> List[Subscription]:
        rows = self.db.query(SubscriptionModel).filter(
            SubscriptionModel.is_active == True
        ).order_by(SubscriptionModel.name).all()
        return [Subscription.model_validate(r, from_attributes=True) for r in rows]


class SqlProcessingLogRepository(ProcessingLogRepository):

    def __init__(self, db: Session, limit: int = 100):
        super().__init__(limit)
        self.db = db

    def append(self, result: ProcessingResult) -> None:
        self.db.add(ProcessingLog(
            source=result.source,
            success=result.success,
            confidence=result.confidence,
            processing_time_ms=result.processing_time_ms,
            transaction_id=result.transaction.id if result.transaction else None,
            error_message=result.error,
            payload=result.model_dump(mode="json"),
            processed_at=result.processed_at,
        ))
        self.db.flush()

        # Keep only the newest entries
        stale = [
            row_id for (row_id,) in self.db.query(ProcessingLog.id)
            .order_by(ProcessingLog.id.desc())
            .offset(self.limit)
            .all()
        ]
        if stale:
            self.db.query(ProcessingLog).filter(
                ProcessingLog.id.in_(stale)
            ).delete(synchronize_session=False)
        self.db.commit()

    def list_recent(self, limit: Optional[int] = None) -> List[ProcessingResult]:
        query = self.db.query(ProcessingLog).order_by(ProcessingLog.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return [ProcessingResult.model_validate(row.payload) for row in query.all()]

    def clear(self) -> None:
        self.db.query(ProcessingLog).delete()
        self.db.commit()
