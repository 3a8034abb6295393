"""SQLAlchemy ORM models for finance entities"""

import uuid
from datetime import timezone

from sqlalchemy import (
    Column,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

from cashflow_gateway.config import settings

Base = declarative_base()


class UtcDateTime(TypeDecorator):
    """
    Timestamp stored as naive UTC and loaded back timezone-aware.

    Naive values are taken as wall-clock time in the configured timezone.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=settings.tz)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value.replace(tzinfo=timezone.utc)


class AccountRecord(Base):
    """Bank account with last known balance"""

    __tablename__ = "accounts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)  # checking | savings | investment
    balance_cents = Column(BigInteger, nullable=False, default=0)
    balance_updated_at = Column(UtcDateTime, nullable=True)
    owner_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ProjectRecord(Base):
    """Recurring income source"""

    __tablename__ = "projects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    frequency = Column(Text, nullable=False)
    payment_schedule = Column(JSON, nullable=False)
    certainty = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SingleShotIncomeRecord(Base):
    __tablename__ = "single_shot_income"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    certainty = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FixedExpenseRecord(Base):
    __tablename__ = "expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_day = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SingleShotExpenseRecord(Base):
    __tablename__ = "single_shot_expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CreditCardRecord(Base):
    """Credit card with its current statement"""

    __tablename__ = "credit_cards"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    statement_balance_cents = Column(BigInteger, nullable=False, default=0)
    due_day = Column(Integer, nullable=False)
    owner_id = Column(Text, nullable=True)
    balance_updated_at = Column(UtcDateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    future_statements = relationship(
        "FutureStatementRecord", back_populates="credit_card", cascade="all, delete-orphan"
    )


class FutureStatementRecord(Base):
    """Known bill for a card in a future month"""

    __tablename__ = "future_statements"
    __table_args__ = (
        UniqueConstraint("credit_card_id", "target_month", "target_year", name="uq_future_statement_card_month"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    credit_card_id = Column(
        Uuid(as_uuid=True), ForeignKey("credit_cards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_month = Column(Integer, nullable=False)
    target_year = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    credit_card = relationship("CreditCardRecord", back_populates="future_statements")


class MonthProgressionRun(Base):
    """Audit row for each month progression pass"""

    __tablename__ = "month_progression_runs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    run_on = Column(Date, nullable=False)
    promoted_cards = Column(Integer, nullable=False, default=0)
    expired_statements = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
