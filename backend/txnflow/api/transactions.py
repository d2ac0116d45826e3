"""
Transaction API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional
from datetime import date

from txnflow.dependencies import get_db, get_transaction_repository
from txnflow.models.transaction import Transaction as TransactionModel
from txnflow.repositories.sql import SqlTransactionRepository
from txnflow.schemas.parsed_message import Direction, Institution
from txnflow.schemas.transaction import Transaction, TransactionListResponse

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    institution: Optional[Institution] = None,
    direction: Optional[Direction] = None,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List transactions with filtering and pagination"""
    query = db.query(TransactionModel)

    if institution:
        query = query.filter(TransactionModel.institution == institution)
    if direction:
        query = query.filter(TransactionModel.direction == direction)
    if category:
        query = query.filter(TransactionModel.category == category)
    if start_date:
        query = query.filter(TransactionModel.timestamp >= start_date)
    if end_date:
        query = query.filter(TransactionModel.timestamp < date.fromordinal(end_date.toordinal() + 1))
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                TransactionModel.raw_text.ilike(search_term),
                TransactionModel.merchant.ilike(search_term),
                TransactionModel.reason.ilike(search_term)
            )
        )

    total = query.count()

    query = query.order_by(TransactionModel.timestamp.desc(), TransactionModel.id)
    query = query.offset((page - 1) * per_page).limit(per_page)

    transactions = query.all()
    pages = (total + per_page - 1) // per_page

    return TransactionListResponse(
        items=[Transaction.model_validate(t, from_attributes=True) for t in transactions],
        total=total,
        page=page,
        pages=pages
    )


@router.get("/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: str,
    repository: SqlTransactionRepository = Depends(get_transaction_repository)
):
    """Get a single transaction"""
    transaction = repository.get(transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction
