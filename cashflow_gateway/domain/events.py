"""Event materialization - converts finance entities into dated cash events"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from cashflow_gateway.domain.exceptions import InvalidAmountError
from cashflow_gateway.domain.models import (
    CashEvent,
    Certainty,
    CreditCard,
    DayOfMonthSchedule,
    FinanceEntities,
    Frequency,
    FutureStatement,
    OneOffSchedule,
    ScenarioMask,
    SourceType,
)
from cashflow_gateway.domain.recurrence import expand, occurrence_amount
from cashflow_gateway.utils.date_utils import clamp_day

BOTH_SCENARIOS = ScenarioMask(optimistic=True, pessimistic=True)
OPTIMISTIC_ONLY = ScenarioMask(optimistic=True, pessimistic=False)


def require_cents(value: object, label: str) -> int:
    """Reject money values that aren't plain integers (floats would drift)"""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmountError(f"{label}: amount must be integer cents, got {value!r}")
    return value


def income_mask(certainty: Certainty) -> ScenarioMask:
    """Guaranteed income counts in both scenarios, anything else only in the optimistic one"""
    return BOTH_SCENARIOS if Certainty(certainty) == Certainty.GUARANTEED else OPTIMISTIC_ONLY


def nearest_due_date(due_day: int, as_of: date) -> date:
    """First (clamped) due date on or after as_of"""
    candidate = clamp_day(as_of.year, as_of.month, due_day)
    if candidate < as_of:
        next_month = as_of.replace(day=1) + relativedelta(months=1)
        candidate = clamp_day(next_month.year, next_month.month, due_day)
    return candidate


def credit_card_amount_for(
    card: CreditCard,
    due: date,
    overrides: Dict[Tuple[str, int, int], FutureStatement],
    statement_as_of: date,
) -> int:
    """
    Bill charged on a card's due date.

    - A future statement for (card, month, year) always wins
    - Otherwise the current statement balance, only on the nearest cycle
    - Otherwise zero: card spend is never extrapolated into later months
    """
    override = overrides.get((card.id, due.month, due.year))
    if override is not None:
        return require_cents(override.amount, f"future statement {override.id}")
    if due == nearest_due_date(card.due_day, statement_as_of):
        return require_cents(card.statement_balance, f"credit card {card.name}")
    return 0


def materialize(
    entities: FinanceEntities,
    range_start: date,
    range_end: date,
    statement_as_of: Optional[date] = None,
) -> List[CashEvent]:
    """
    Build the date-ordered list of cash events in [range_start, range_end].

    Within a day, events keep source order: incomes, fixed expenses,
    single-shot expenses, credit card dues. Inactive projects and fixed
    expenses are skipped entirely.

    Raises:
        InvalidScheduleError: A stored schedule or due day is malformed
        InvalidAmountError: A stored amount isn't integer cents
    """
    as_of = statement_as_of or range_start
    events: List[CashEvent] = []

    for project in entities.projects:
        if not project.is_active:
            continue
        amount = require_cents(project.amount, f"project {project.name}")
        for occurrence in expand(project.payment_schedule, project.frequency, range_start, range_end):
            events.append(
                CashEvent(
                    date=occurrence,
                    amount=require_cents(
                        occurrence_amount(project.payment_schedule, amount, occurrence),
                        f"project {project.name}",
                    ),
                    scenario_mask=income_mask(project.certainty),
                    source_id=project.id,
                    source_label=project.name,
                    source_type=SourceType.INCOME,
                    certainty=Certainty(project.certainty),
                )
            )

    for income in entities.single_shot_incomes:
        amount = require_cents(income.amount, f"income {income.name}")
        for occurrence in expand(OneOffSchedule(income.date), Frequency.ONCE, range_start, range_end):
            events.append(
                CashEvent(
                    date=occurrence,
                    amount=amount,
                    scenario_mask=income_mask(income.certainty),
                    source_id=income.id,
                    source_label=income.name,
                    source_type=SourceType.INCOME,
                    certainty=Certainty(income.certainty),
                )
            )

    for expense in entities.fixed_expenses:
        if not expense.is_active:
            continue
        amount = require_cents(expense.amount, f"expense {expense.name}")
        for occurrence in expand(DayOfMonthSchedule(expense.due_day), Frequency.MONTHLY, range_start, range_end):
            events.append(
                CashEvent(
                    date=occurrence,
                    amount=-amount,
                    scenario_mask=BOTH_SCENARIOS,
                    source_id=expense.id,
                    source_label=expense.name,
                    source_type=SourceType.EXPENSE,
                )
            )

    for expense in entities.single_shot_expenses:
        amount = require_cents(expense.amount, f"expense {expense.name}")
        for occurrence in expand(OneOffSchedule(expense.date), Frequency.ONCE, range_start, range_end):
            events.append(
                CashEvent(
                    date=occurrence,
                    amount=-amount,
                    scenario_mask=BOTH_SCENARIOS,
                    source_id=expense.id,
                    source_label=expense.name,
                    source_type=SourceType.EXPENSE,
                )
            )

    overrides = {(s.credit_card_id, s.target_month, s.target_year): s for s in entities.future_statements}
    for card in entities.credit_cards:
        for due in expand(DayOfMonthSchedule(card.due_day), Frequency.MONTHLY, range_start, range_end):
            amount = credit_card_amount_for(card, due, overrides, as_of)
            if amount == 0:
                continue
            events.append(
                CashEvent(
                    date=due,
                    amount=-amount,
                    scenario_mask=BOTH_SCENARIOS,
                    source_id=card.id,
                    source_label=card.name,
                    source_type=SourceType.CREDIT_CARD,
                )
            )

    # Stable sort keeps source order within each day
    events.sort(key=lambda e: e.date)
    return events
