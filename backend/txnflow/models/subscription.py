"""
Subscription database model.
"""

from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Date, Numeric, Float, Enum, Text, JSON
from txnflow.database import Base
from txnflow.schemas.recurring import Frequency


class Subscription(Base):
    """Subscription model for recurring payments promoted from detected patterns."""

    __tablename__ = "subscriptions"

    id = Column(String(255), primary_key=True)
    name = Column(String(100), nullable=False)
    counterparty = Column(String(255), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    frequency = Column(Enum(Frequency), nullable=False)
    next_billing_date = Column(Date, nullable=False)
    category = Column(String(50), nullable=False, default="Other")
    is_active = Column(Boolean, default=True, nullable=False)
    confidence = Column(Float, nullable=False)
    source_transaction_ids = Column(JSON, nullable=False, default=list)
    auto_renew = Column(Boolean, default=True, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
