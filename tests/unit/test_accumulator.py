"""Unit tests for the scenario accumulator"""

import pytest
from datetime import date, timedelta
from cashflow_gateway.domain.models import (
    CashEvent,
    Certainty,
    CreditCard,
    DayOfWeekSchedule,
    FinanceEntities,
    FixedExpense,
    Frequency,
    FutureStatement,
    RecurringIncome,
    SourceType,
)
from cashflow_gateway.domain.accumulator import project, validate_horizon
from cashflow_gateway.domain.events import BOTH_SCENARIOS, OPTIMISTIC_ONLY, materialize
from cashflow_gateway.domain.exceptions import InvalidAmountError, InvalidHorizonError

START = date(2025, 11, 1)


def _event(offset: int, amount: int, mask=BOTH_SCENARIOS) -> CashEvent:
    return CashEvent(
        date=START + timedelta(days=offset),
        amount=amount,
        scenario_mask=mask,
        source_id=f"src-{offset}-{amount}",
        source_label="Test",
        source_type=SourceType.INCOME if amount > 0 else SourceType.EXPENSE,
    )


def test_returns_horizon_plus_one_days():
    days = project(1000, 1000, [], 7, START)

    assert len(days) == 8
    assert days[0].date == START
    assert days[-1].date == START + timedelta(days=7)
    assert [d.day_offset for d in days] == list(range(8))


def test_end_to_end_biweekly_income_and_fixed_expense():
    """
    100000 start, guaranteed biweekly 50000 first landing on day 5,
    fixed expense 30000 due on day 10
    """
    # 2025-11-06 is a Thursday (4), 2025-11-11 is day 10
    entities = FinanceEntities(
        projects=[
            RecurringIncome(
                id="p1",
                name="Paycheck",
                amount=50000,
                frequency=Frequency.BIWEEKLY,
                payment_schedule=DayOfWeekSchedule(4),
                certainty=Certainty.GUARANTEED,
            )
        ],
        fixed_expenses=[FixedExpense(id="e1", name="Utilities", amount=30000, due_day=11)],
    )
    events = materialize(entities, START, START + timedelta(days=30))

    days = project(100000, 100000, events, 30, START)

    assert days[4].optimistic_balance == 100000
    assert days[5].optimistic_balance == 150000
    assert days[10].optimistic_balance == 120000
    assert all(d.optimistic_balance == d.pessimistic_balance for d in days)
    assert not any(d.is_optimistic_danger or d.is_pessimistic_danger for d in days)


def test_pessimistic_never_above_optimistic():
    events = [
        _event(1, 20000, OPTIMISTIC_ONLY),
        _event(2, -50000),
        _event(3, 10000),
        _event(5, 70000, OPTIMISTIC_ONLY),
        _event(6, -90000),
    ]

    days = project(30000, 30000, events, 14, START)

    assert all(d.pessimistic_balance <= d.optimistic_balance for d in days)
    assert days[2].optimistic_balance == 0
    assert days[2].pessimistic_balance == -20000


def test_zero_balance_is_not_danger():
    days = project(10000, 10000, [_event(1, -10000), _event(2, -1)], 3, START)

    assert days[1].optimistic_balance == 0
    assert days[1].is_optimistic_danger is False
    assert days[2].is_optimistic_danger is True
    assert days[2].is_pessimistic_danger is True


def test_same_day_events_all_apply():
    days = project(0, 0, [_event(3, 500), _event(3, -200), _event(3, 100)], 5, START)

    assert days[3].optimistic_balance == 400
    assert len(days[3].events) == 3
    assert len(days[3].income_events) == 2
    assert len(days[3].expense_events) == 1


def test_day_zero_events_apply_to_day_zero():
    days = project(1000, 1000, [_event(0, -300)], 2, START)

    assert days[0].optimistic_balance == 700


def test_events_outside_window_are_ignored():
    days = project(1000, 1000, [_event(-1, 500), _event(10, 500)], 5, START)

    assert all(d.optimistic_balance == 1000 for d in days)


def test_investment_inclusive_balance_tracks_optimistic():
    days = project(1000, 1000, [_event(1, -5000)], 2, START, investment_balance=20000)

    assert days[1].investment_inclusive_balance == -4000 + 20000
    assert days[1].is_optimistic_danger is True


def test_projection_is_deterministic():
    entities = FinanceEntities(
        credit_cards=[CreditCard(id="c1", name="Visa", statement_balance=10000, due_day=15)],
        future_statements=[FutureStatement("f1", "c1", 12, 2025, 5000)],
    )
    events = materialize(entities, START, START + timedelta(days=60))

    first = project(1000, 1000, events, 60, START)
    second = project(1000, 1000, events, 60, START)

    assert first == second


def test_future_statement_override_month_only():
    """Override month pays the override; months without one pay nothing"""
    entities = FinanceEntities(
        credit_cards=[CreditCard(id="c1", name="Visa", statement_balance=10000, due_day=10)],
        future_statements=[FutureStatement("f1", "c1", 6, 2025, 5000)],
    )

    events = materialize(entities, date(2025, 6, 1), date(2025, 8, 31))

    assert [(e.date, e.amount) for e in events] == [(date(2025, 6, 10), -5000)]


@pytest.mark.parametrize("horizon", [0, -7, 7.5, True, "30", None])
def test_invalid_horizon_rejected(horizon):
    with pytest.raises(InvalidHorizonError):
        validate_horizon(horizon)


def test_float_starting_balance_rejected():
    with pytest.raises(InvalidAmountError):
        project(1000.0, 1000, [], 7, START)
