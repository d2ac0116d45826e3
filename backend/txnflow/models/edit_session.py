"""
Edit session database model.
"""

from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Index
from txnflow.database import Base


class EditSession(Base):
    """Edit session model; changes are stored as an ordered JSON list."""

    __tablename__ = "edit_sessions"

    id = Column(String(64), primary_key=True)
    transaction_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(100), nullable=False)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    changes = Column(JSON, nullable=False, default=list)
    closed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_edit_session_subject", "transaction_id", "user_id"),
    )
