"""
Processing log database model.
"""

from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Float, Integer, Enum, Text, JSON
from txnflow.database import Base
from txnflow.schemas.automation import Source


class ProcessingLog(Base):
    """One processed text and its outcome."""

    __tablename__ = "processing_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)  # Insertion order
    source = Column(Enum(Source), nullable=False)
    success = Column(Boolean, nullable=False)
    confidence = Column(Float, nullable=False, default=0.0)
    processing_time_ms = Column(Float, nullable=False, default=0.0)
    transaction_id = Column(String(36), nullable=True)
    error_message = Column(Text, nullable=True)
    payload = Column(JSON, nullable=False)  # Full ProcessingResult dump
    processed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
