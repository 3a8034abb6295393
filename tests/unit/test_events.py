"""Unit tests for cash event materialization"""

import pytest
from datetime import date
from cashflow_gateway.domain.models import (
    Certainty,
    CreditCard,
    DayOfMonthSchedule,
    FinanceEntities,
    FixedExpense,
    Frequency,
    FutureStatement,
    RecurringIncome,
    Scenario,
    SingleShotExpense,
    SingleShotIncome,
    SourceType,
)
from cashflow_gateway.domain.events import (
    credit_card_amount_for,
    income_mask,
    materialize,
    nearest_due_date,
    require_cents,
)
from cashflow_gateway.domain.exceptions import InvalidAmountError


def _salary(certainty=Certainty.GUARANTEED, is_active=True, amount=500000):
    return RecurringIncome(
        id="p1",
        name="Salary",
        amount=amount,
        frequency=Frequency.MONTHLY,
        payment_schedule=DayOfMonthSchedule(15),
        certainty=certainty,
        is_active=is_active,
    )


def test_guaranteed_income_counts_in_both_scenarios():
    mask = income_mask(Certainty.GUARANTEED)

    assert mask.optimistic is True
    assert mask.pessimistic is True


@pytest.mark.parametrize("certainty", [Certainty.PROBABLE, Certainty.UNCERTAIN])
def test_non_guaranteed_income_is_optimistic_only(certainty):
    mask = income_mask(certainty)

    assert mask.optimistic is True
    assert mask.pessimistic is False


def test_project_events_carry_certainty_and_mask():
    entities = FinanceEntities(projects=[_salary(Certainty.PROBABLE)])

    events = materialize(entities, date(2025, 11, 1), date(2025, 12, 31))

    assert [e.date for e in events] == [date(2025, 11, 15), date(2025, 12, 15)]
    assert all(e.amount == 500000 for e in events)
    assert all(e.certainty == Certainty.PROBABLE for e in events)
    assert all(e.applies_to(Scenario.OPTIMISTIC) and not e.applies_to(Scenario.PESSIMISTIC) for e in events)


def test_inactive_entities_emit_nothing():
    entities = FinanceEntities(
        projects=[_salary(is_active=False)],
        fixed_expenses=[FixedExpense(id="e1", name="Gym", amount=10000, due_day=3, is_active=False)],
    )

    assert materialize(entities, date(2025, 11, 1), date(2025, 12, 31)) == []


def test_expenses_are_negative_and_in_both_scenarios():
    entities = FinanceEntities(
        fixed_expenses=[FixedExpense(id="e1", name="Rent", amount=300000, due_day=10)],
        single_shot_expenses=[SingleShotExpense(id="s1", name="Car repair", amount=45000, date=date(2025, 11, 12))],
    )

    events = materialize(entities, date(2025, 11, 1), date(2025, 11, 30))

    assert [(e.date, e.amount) for e in events] == [(date(2025, 11, 10), -300000), (date(2025, 11, 12), -45000)]
    assert all(e.source_type == SourceType.EXPENSE for e in events)
    assert all(e.applies_to(Scenario.OPTIMISTIC) and e.applies_to(Scenario.PESSIMISTIC) for e in events)


def test_single_shot_income_outside_range_skipped():
    entities = FinanceEntities(
        single_shot_incomes=[
            SingleShotIncome(id="i1", name="Bonus", amount=90000, date=date(2025, 10, 31), certainty=Certainty.PROBABLE),
            SingleShotIncome(id="i2", name="Refund", amount=5000, date=date(2025, 11, 2), certainty=Certainty.GUARANTEED),
        ]
    )

    events = materialize(entities, date(2025, 11, 1), date(2025, 11, 30))

    assert [e.source_id for e in events] == ["i2"]


def test_same_day_events_keep_source_order():
    """Incomes, then fixed expenses, then single-shot expenses, then card dues"""
    day = date(2025, 11, 15)
    entities = FinanceEntities(
        credit_cards=[CreditCard(id="c1", name="Visa", statement_balance=20000, due_day=15)],
        single_shot_expenses=[SingleShotExpense(id="s1", name="Dentist", amount=15000, date=day)],
        fixed_expenses=[FixedExpense(id="e1", name="Rent", amount=300000, due_day=15)],
        projects=[_salary()],
    )

    events = materialize(entities, date(2025, 11, 1), date(2025, 11, 30))

    assert [e.source_id for e in events] == ["p1", "e1", "s1", "c1"]


def test_nearest_due_date_rolls_into_next_month():
    assert nearest_due_date(10, date(2025, 11, 10)) == date(2025, 11, 10)
    assert nearest_due_date(10, date(2025, 11, 11)) == date(2025, 12, 10)
    assert nearest_due_date(31, date(2026, 2, 1)) == date(2026, 2, 28)


def test_card_statement_charged_only_on_nearest_cycle():
    """Card spend is not extrapolated: later cycles without a future statement charge nothing"""
    entities = FinanceEntities(
        credit_cards=[CreditCard(id="c1", name="Visa", statement_balance=80000, due_day=12)],
    )

    events = materialize(entities, date(2025, 11, 10), date(2026, 1, 31))

    assert [(e.date, e.amount) for e in events] == [(date(2025, 11, 12), -80000)]
    assert events[0].source_type == SourceType.CREDIT_CARD


def test_future_statement_overrides_statement_balance():
    card = CreditCard(id="c1", name="Visa", statement_balance=80000, due_day=12)
    statements = [
        FutureStatement(id="f1", credit_card_id="c1", target_month=11, target_year=2025, amount=95000),
        FutureStatement(id="f2", credit_card_id="c1", target_month=12, target_year=2025, amount=40000),
    ]
    entities = FinanceEntities(credit_cards=[card], future_statements=statements)

    events = materialize(entities, date(2025, 11, 10), date(2026, 1, 31))

    assert [(e.date, e.amount) for e in events] == [(date(2025, 11, 12), -95000), (date(2025, 12, 12), -40000)]


def test_zero_future_statement_means_no_bill():
    card = CreditCard(id="c1", name="Visa", statement_balance=80000, due_day=12)
    overrides = {("c1", 11, 2025): FutureStatement("f1", "c1", 11, 2025, 0)}

    assert credit_card_amount_for(card, date(2025, 11, 12), overrides, date(2025, 11, 10)) == 0


def test_statement_as_of_moves_the_nearest_cycle():
    """A statement already paid before the range start isn't charged again"""
    entities = FinanceEntities(
        credit_cards=[CreditCard(id="c1", name="Visa", statement_balance=80000, due_day=12)],
    )

    events = materialize(entities, date(2025, 11, 14), date(2025, 12, 31), statement_as_of=date(2025, 11, 5))

    assert events == []


@pytest.mark.parametrize("value", [100.5, True, "100", None])
def test_require_cents_rejects_non_integers(value):
    with pytest.raises(InvalidAmountError):
        require_cents(value, "test")


def test_float_amount_on_entity_rejected():
    entities = FinanceEntities(projects=[_salary(amount=5000.0)])

    with pytest.raises(InvalidAmountError):
        materialize(entities, date(2025, 11, 1), date(2025, 11, 30))
