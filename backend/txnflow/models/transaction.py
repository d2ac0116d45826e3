"""
Transaction database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Numeric, Float, Text, JSON, Enum, Index
from txnflow.database import Base
from txnflow.schemas.parsed_message import Direction, Institution, Language


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    fingerprint = Column(String(64), nullable=True, index=True)  # For duplicate detection
    amount = Column(Numeric(14, 2), nullable=False)
    institution = Column(Enum(Institution), nullable=False)
    merchant = Column(String(255), nullable=True)
    direction = Column(Enum(Direction), nullable=False)
    timestamp = Column(DateTime, nullable=True, index=True)
    reference = Column(String(100), nullable=True)
    balance = Column(Numeric(14, 2), nullable=True)
    category = Column(String(50), nullable=False, default="Other")
    reason = Column(String(255), nullable=True)
    location = Column(String(100), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    confidence = Column(Float, nullable=False, default=0.0)
    language = Column(Enum(Language), nullable=False, default=Language.en)
    raw_text = Column(Text, nullable=False, default="")
    provenance = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Indexes for common queries
    __table_args__ = (
        Index("idx_transaction_merchant", "merchant"),
        Index("idx_transaction_category", "category"),
    )
