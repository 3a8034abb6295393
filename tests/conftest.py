"""Pytest fixtures for testing"""

import os

os.environ.setdefault("CREATE_TABLES", "false")

import pytest
from datetime import date, datetime
from typing import Generator
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cashflow_gateway.api.dependencies import get_change_notifier, get_clock
from cashflow_gateway.api.main import create_app
from cashflow_gateway.infrastructure.clients.notifier import ChangeNotifier
from cashflow_gateway.infrastructure.database.models import Base
from cashflow_gateway.infrastructure.database.session import get_db
from cashflow_gateway.domain.models import (
    Account,
    AccountType,
    Certainty,
    CreditCard,
    DayOfMonthSchedule,
    FinanceEntities,
    FixedExpense,
    Frequency,
    RecurringIncome,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SAO_PAULO = ZoneInfo("America/Sao_Paulo")

# Frozen "now" used by every API test: Monday 2025-11-10, mid-morning local time
FIXED_NOW = datetime(2025, 11, 10, 9, 30, tzinfo=SAO_PAULO)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier() -> ChangeNotifier:
    """Notifier whose delivery is mocked out"""
    notifier = ChangeNotifier(webhook_url="http://webhook.test/changes")
    notifier.send_change_event = AsyncMock(return_value=None)
    return notifier


@pytest.fixture
def client(db: Session, notifier: ChangeNotifier) -> TestClient:
    """Create FastAPI test client with test database, frozen clock and mocked webhook"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    app.dependency_overrides[get_change_notifier] = lambda: notifier
    return TestClient(app)


@pytest.fixture
def sample_entities() -> FinanceEntities:
    """Household with a salary, freelance income, rent and a credit card"""
    return FinanceEntities(
        accounts=[
            Account(
                id="acc-checking",
                name="Checking",
                type=AccountType.CHECKING,
                balance=150000,
                balance_updated_at=datetime(2025, 11, 10, 8, 0, tzinfo=SAO_PAULO),
            ),
            Account(
                id="acc-invest",
                name="Brokerage",
                type=AccountType.INVESTMENT,
                balance=1000000,
                balance_updated_at=datetime(2025, 11, 1, 8, 0, tzinfo=SAO_PAULO),
            ),
        ],
        projects=[
            RecurringIncome(
                id="proj-salary",
                name="Salary",
                amount=500000,
                frequency=Frequency.MONTHLY,
                payment_schedule=DayOfMonthSchedule(day_of_month=5),
                certainty=Certainty.GUARANTEED,
            ),
            RecurringIncome(
                id="proj-freelance",
                name="Freelance",
                amount=250000,
                frequency=Frequency.MONTHLY,
                payment_schedule=DayOfMonthSchedule(day_of_month=20),
                certainty=Certainty.UNCERTAIN,
            ),
        ],
        fixed_expenses=[FixedExpense(id="exp-rent", name="Rent", amount=300000, due_day=15)],
        credit_cards=[
            CreditCard(
                id="card-visa",
                name="Visa",
                statement_balance=80000,
                due_day=12,
                balance_updated_at=datetime(2025, 11, 3, 10, 0, tzinfo=SAO_PAULO),
            )
        ],
    )


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def today() -> date:
    return FIXED_NOW.date()
