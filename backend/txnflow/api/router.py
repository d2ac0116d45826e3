"""
Main API router.
"""

from fastapi import APIRouter
from txnflow.api import intake, transactions, sessions, recurring

api_router = APIRouter()

api_router.include_router(intake.router)
api_router.include_router(transactions.router)
api_router.include_router(sessions.router)
api_router.include_router(recurring.router)
