"""Data access layer for finance entities"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cashflow_gateway.domain.exceptions import (
    DuplicateFutureStatementError,
    EntityNotFoundError,
    InvalidScheduleError,
)
from cashflow_gateway.domain.models import (
    Account,
    AccountType,
    Certainty,
    CreditCard,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    FinanceEntities,
    FixedExpense,
    Frequency,
    FutureStatement,
    PaymentSchedule,
    RecurringIncome,
    SingleShotExpense,
    SingleShotIncome,
    TwiceMonthlySchedule,
)
from cashflow_gateway.domain.month_progression import ProgressionPlan
from cashflow_gateway.infrastructure.database.models import (
    AccountRecord,
    Base,
    CreditCardRecord,
    FixedExpenseRecord,
    FutureStatementRecord,
    MonthProgressionRun,
    ProjectRecord,
    SingleShotExpenseRecord,
    SingleShotIncomeRecord,
)


def schedule_to_json(schedule: PaymentSchedule) -> Dict[str, Any]:
    if isinstance(schedule, DayOfMonthSchedule):
        return {"kind": schedule.kind, "day_of_month": schedule.day_of_month}
    if isinstance(schedule, DayOfWeekSchedule):
        return {"kind": schedule.kind, "day_of_week": schedule.day_of_week}
    if isinstance(schedule, TwiceMonthlySchedule):
        return {
            "kind": schedule.kind,
            "first_day": schedule.first_day,
            "second_day": schedule.second_day,
            "first_amount": schedule.first_amount,
            "second_amount": schedule.second_amount,
        }
    raise InvalidScheduleError(f"Schedule {type(schedule).__name__} can't be stored on a recurring income")


def schedule_from_json(raw: Dict[str, Any]) -> PaymentSchedule:
    """
    Rebuild a tagged schedule from its stored JSON.

    Raises:
        InvalidScheduleError: Unknown kind or missing fields
    """
    try:
        kind = raw["kind"]
        if kind == "dayOfMonth":
            return DayOfMonthSchedule(day_of_month=raw["day_of_month"])
        if kind == "dayOfWeek":
            return DayOfWeekSchedule(day_of_week=raw["day_of_week"])
        if kind == "twiceMonthly":
            return TwiceMonthlySchedule(
                first_day=raw["first_day"],
                second_day=raw["second_day"],
                first_amount=raw.get("first_amount"),
                second_amount=raw.get("second_amount"),
            )
    except (KeyError, TypeError) as e:
        raise InvalidScheduleError(f"Malformed stored schedule: {raw!r}") from e
    raise InvalidScheduleError(f"Unknown schedule kind: {raw.get('kind')!r}")


def account_to_domain(row: AccountRecord) -> Account:
    return Account(
        id=str(row.id),
        name=row.name,
        type=AccountType(row.type),
        balance=row.balance_cents,
        balance_updated_at=row.balance_updated_at,
        owner_id=row.owner_id,
    )


def project_to_domain(row: ProjectRecord) -> RecurringIncome:
    return RecurringIncome(
        id=str(row.id),
        name=row.name,
        amount=row.amount_cents,
        frequency=Frequency(row.frequency),
        payment_schedule=schedule_from_json(row.payment_schedule),
        certainty=Certainty(row.certainty),
        is_active=row.is_active,
    )


def single_shot_income_to_domain(row: SingleShotIncomeRecord) -> SingleShotIncome:
    return SingleShotIncome(
        id=str(row.id),
        name=row.name,
        amount=row.amount_cents,
        date=row.date,
        certainty=Certainty(row.certainty),
    )


def fixed_expense_to_domain(row: FixedExpenseRecord) -> FixedExpense:
    return FixedExpense(
        id=str(row.id),
        name=row.name,
        amount=row.amount_cents,
        due_day=row.due_day,
        is_active=row.is_active,
    )


def single_shot_expense_to_domain(row: SingleShotExpenseRecord) -> SingleShotExpense:
    return SingleShotExpense(id=str(row.id), name=row.name, amount=row.amount_cents, date=row.date)


def credit_card_to_domain(row: CreditCardRecord) -> CreditCard:
    return CreditCard(
        id=str(row.id),
        name=row.name,
        statement_balance=row.statement_balance_cents,
        due_day=row.due_day,
        owner_id=row.owner_id,
        balance_updated_at=row.balance_updated_at,
    )


def future_statement_to_domain(row: FutureStatementRecord) -> FutureStatement:
    return FutureStatement(
        id=str(row.id),
        credit_card_id=str(row.credit_card_id),
        target_month=row.target_month,
        target_year=row.target_year,
        amount=row.amount_cents,
    )


class EntityRepository:
    """Generic create/list/get/delete for one entity table"""

    def __init__(self, db: Session, model: Type[Base]):
        self.db = db
        self.model = model

    def create(self, **values: Any) -> Base:
        record = self.model(**values)
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def list(self) -> List[Base]:
        return self.db.query(self.model).order_by(self.model.created_at).all()

    def get(self, entity_id: str) -> Base:
        """
        Raises:
            EntityNotFoundError: Unknown or malformed id
        """
        try:
            key = uuid.UUID(str(entity_id))
        except ValueError:
            raise EntityNotFoundError(f"{self.model.__tablename__}: invalid id {entity_id!r}")

        record = self.db.get(self.model, key)
        if record is None:
            raise EntityNotFoundError(f"{self.model.__tablename__}: {entity_id} not found")
        return record

    def delete(self, entity_id: str) -> None:
        self.db.delete(self.get(entity_id))
        self.db.flush()


class FinanceRepository:
    """Repository for the full finance entity set"""

    def __init__(self, db: Session):
        self.db = db
        self.accounts = EntityRepository(db, AccountRecord)
        self.projects = EntityRepository(db, ProjectRecord)
        self.single_shot_incomes = EntityRepository(db, SingleShotIncomeRecord)
        self.fixed_expenses = EntityRepository(db, FixedExpenseRecord)
        self.single_shot_expenses = EntityRepository(db, SingleShotExpenseRecord)
        self.credit_cards = EntityRepository(db, CreditCardRecord)
        self.future_statements = EntityRepository(db, FutureStatementRecord)

    def load_entities(self) -> FinanceEntities:
        """Read a consistent snapshot of every entity for projection"""
        return FinanceEntities(
            accounts=[account_to_domain(r) for r in self.accounts.list()],
            projects=[project_to_domain(r) for r in self.projects.list()],
            single_shot_incomes=[single_shot_income_to_domain(r) for r in self.single_shot_incomes.list()],
            fixed_expenses=[fixed_expense_to_domain(r) for r in self.fixed_expenses.list()],
            single_shot_expenses=[single_shot_expense_to_domain(r) for r in self.single_shot_expenses.list()],
            credit_cards=[credit_card_to_domain(r) for r in self.credit_cards.list()],
            future_statements=[future_statement_to_domain(r) for r in self.future_statements.list()],
        )

    def update_account_balance(self, account_id: str, balance_cents: int, updated_at: datetime) -> AccountRecord:
        """Quick update: new balance stamped with the time it was confirmed"""
        record = self.accounts.get(account_id)
        record.balance_cents = balance_cents
        record.balance_updated_at = updated_at
        self.db.flush()
        return record

    def update_card_statement(self, card_id: str, statement_cents: int, updated_at: datetime) -> CreditCardRecord:
        record = self.credit_cards.get(card_id)
        record.statement_balance_cents = statement_cents
        record.balance_updated_at = updated_at
        self.db.flush()
        return record

    def create_future_statement(
        self, credit_card_id: str, target_month: int, target_year: int, amount_cents: int
    ) -> FutureStatementRecord:
        """
        Raises:
            EntityNotFoundError: Card doesn't exist
            DuplicateFutureStatementError: Card already has a statement for that month
        """
        card = self.credit_cards.get(credit_card_id)
        existing = (
            self.db.query(FutureStatementRecord)
            .filter(
                FutureStatementRecord.credit_card_id == card.id,
                FutureStatementRecord.target_month == target_month,
                FutureStatementRecord.target_year == target_year,
            )
            .first()
        )
        if existing:
            raise DuplicateFutureStatementError(
                f"Card {credit_card_id} already has a statement for {target_month:02d}/{target_year}"
            )

        try:
            return self.future_statements.create(
                credit_card_id=card.id,
                target_month=target_month,
                target_year=target_year,
                amount_cents=amount_cents,
            )
        except IntegrityError as e:
            raise DuplicateFutureStatementError(str(e.orig)) from e

    def apply_progression(self, plan: ProgressionPlan, run_on: date) -> MonthProgressionRun:
        """Apply a month progression plan inside the current transaction"""
        for card_id, amount in plan.card_balances.items():
            self.credit_cards.get(card_id).statement_balance_cents = amount

        for statement_id in plan.consumed_statement_ids + plan.expired_statement_ids:
            self.db.delete(self.future_statements.get(statement_id))

        run = MonthProgressionRun(
            run_on=run_on,
            promoted_cards=len(plan.card_balances),
            expired_statements=len(plan.expired_statement_ids),
        )
        self.db.add(run)
        self.db.flush()
        return run

    def confirm_all_balances(self, confirmed_at: datetime) -> Tuple[List[AccountRecord], List[CreditCardRecord]]:
        """Re-stamp every account and card balance as confirmed, values untouched"""
        accounts = self.accounts.list()
        cards = self.credit_cards.list()
        for record in accounts + cards:
            record.balance_updated_at = confirmed_at
        self.db.flush()
        return accounts, cards

    def last_progression_run(self) -> Optional[date]:
        run = self.db.query(MonthProgressionRun).order_by(MonthProgressionRun.run_on.desc()).first()
        return run.run_on if run else None
