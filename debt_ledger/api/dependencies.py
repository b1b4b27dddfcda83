"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from debt_ledger.infrastructure.database.repositories import LedgerQueries
from debt_ledger.infrastructure.database.session import get_db

Clock = Callable[[], datetime]


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Clock:
    """Current-time source for due-date reports (overridden in tests)"""
    return datetime.now


def get_ledger_queries(db: Session = Depends(get_db)) -> LedgerQueries:
    """Read-side store used by validation rules and reports"""
    return LedgerQueries(db)
