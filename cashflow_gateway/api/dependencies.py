"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cashflow_gateway.config import settings
from cashflow_gateway.infrastructure.clients.notifier import ChangeNotifier
from cashflow_gateway.infrastructure.database.repositories import FinanceRepository
from cashflow_gateway.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Callable[[], datetime]:
    """Provide the clock; the projection engine itself never reads it"""
    return lambda: datetime.now(settings.tz)


def get_change_notifier() -> ChangeNotifier:
    """Provide change webhook client instance"""
    return ChangeNotifier()


def get_finance_repository(db: Session = Depends(get_db)) -> FinanceRepository:
    return FinanceRepository(db)
