"""Unit tests for payment schedule expansion"""

import pytest
from datetime import date
from cashflow_gateway.domain.models import (
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    Frequency,
    OneOffSchedule,
    TwiceMonthlySchedule,
)
from cashflow_gateway.domain.recurrence import expand, occurrence_amount, validate_schedule
from cashflow_gateway.domain.exceptions import InvalidScheduleError


def test_monthly_day_31_clamps_to_month_end():
    """Day 31 falls on the last day of shorter months"""
    dates = expand(DayOfMonthSchedule(31), Frequency.MONTHLY, date(2025, 1, 1), date(2025, 4, 30))

    assert dates == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]


def test_monthly_february_leap_year():
    """Feb 2024 has 29 days, Feb 2023 has 28"""
    leap = expand(DayOfMonthSchedule(30), Frequency.MONTHLY, date(2024, 2, 1), date(2024, 2, 29))
    common = expand(DayOfMonthSchedule(30), Frequency.MONTHLY, date(2023, 2, 1), date(2023, 2, 28))

    assert leap == [date(2024, 2, 29)]
    assert common == [date(2023, 2, 28)]


def test_monthly_respects_range_bounds():
    """Occurrences before the range start or after the end are dropped"""
    dates = expand(DayOfMonthSchedule(5), Frequency.MONTHLY, date(2025, 11, 10), date(2026, 1, 4))

    assert dates == [date(2025, 12, 5)]


def test_single_day_range_inclusive():
    dates = expand(DayOfMonthSchedule(10), Frequency.MONTHLY, date(2025, 11, 10), date(2025, 11, 10))

    assert dates == [date(2025, 11, 10)]


def test_weekly_uses_sunday_based_weekday():
    """0 = Sunday; 2025-11-09 is a Sunday"""
    dates = expand(DayOfWeekSchedule(0), Frequency.WEEKLY, date(2025, 11, 5), date(2025, 11, 30))

    assert dates == [date(2025, 11, 9), date(2025, 11, 16), date(2025, 11, 23), date(2025, 11, 30)]


def test_weekly_friday():
    dates = expand(DayOfWeekSchedule(5), Frequency.WEEKLY, date(2025, 11, 1), date(2025, 11, 15))

    assert dates == [date(2025, 11, 7), date(2025, 11, 14)]
    assert all(d.weekday() == 4 for d in dates)


def test_biweekly_steps_fourteen_days_from_first_match():
    dates = expand(DayOfWeekSchedule(1), Frequency.BIWEEKLY, date(2025, 11, 1), date(2025, 12, 31))

    assert dates == [date(2025, 11, 3), date(2025, 11, 17), date(2025, 12, 1), date(2025, 12, 15), date(2025, 12, 29)]


def test_biweekly_includes_range_start_when_it_matches():
    dates = expand(DayOfWeekSchedule(1), Frequency.BIWEEKLY, date(2025, 11, 10), date(2025, 11, 30))

    assert dates == [date(2025, 11, 10), date(2025, 11, 24)]


def test_twice_monthly_emits_both_days_in_order():
    schedule = TwiceMonthlySchedule(first_day=20, second_day=5)
    dates = expand(schedule, Frequency.TWICE_MONTHLY, date(2025, 11, 1), date(2025, 12, 31))

    assert dates == [date(2025, 11, 5), date(2025, 11, 20), date(2025, 12, 5), date(2025, 12, 20)]


def test_twice_monthly_dedupes_days_clamped_to_same_date():
    """30 and 31 both clamp to Feb 28 in a common year: one occurrence"""
    schedule = TwiceMonthlySchedule(first_day=30, second_day=31)
    dates = expand(schedule, Frequency.TWICE_MONTHLY, date(2025, 2, 1), date(2025, 2, 28))

    assert dates == [date(2025, 2, 28)]


def test_one_off_in_and_out_of_range():
    schedule = OneOffSchedule(date(2025, 11, 20))

    assert expand(schedule, Frequency.ONCE, date(2025, 11, 1), date(2025, 11, 30)) == [date(2025, 11, 20)]
    assert expand(schedule, Frequency.ONCE, date(2025, 12, 1), date(2025, 12, 31)) == []


def test_inverted_range_rejected():
    with pytest.raises(InvalidScheduleError):
        expand(DayOfMonthSchedule(5), Frequency.MONTHLY, date(2025, 12, 1), date(2025, 11, 1))


@pytest.mark.parametrize(
    "schedule,frequency",
    [
        (DayOfMonthSchedule(0), Frequency.MONTHLY),
        (DayOfMonthSchedule(32), Frequency.MONTHLY),
        (DayOfWeekSchedule(7), Frequency.WEEKLY),
        (DayOfWeekSchedule(-1), Frequency.BIWEEKLY),
        (TwiceMonthlySchedule(first_day=1, second_day=40), Frequency.TWICE_MONTHLY),
        (DayOfWeekSchedule(1), Frequency.MONTHLY),
        (DayOfMonthSchedule(5), Frequency.WEEKLY),
        (DayOfMonthSchedule(5), Frequency.TWICE_MONTHLY),
    ],
)
def test_invalid_schedules_rejected(schedule, frequency):
    with pytest.raises(InvalidScheduleError):
        validate_schedule(schedule, frequency)


def test_unknown_frequency_rejected():
    with pytest.raises(InvalidScheduleError):
        validate_schedule(DayOfMonthSchedule(5), "quarterly")


def test_twice_monthly_variable_amounts():
    schedule = TwiceMonthlySchedule(first_day=5, second_day=20, first_amount=100000, second_amount=60000)

    assert occurrence_amount(schedule, 80000, date(2025, 11, 5)) == 100000
    assert occurrence_amount(schedule, 80000, date(2025, 11, 20)) == 60000


def test_twice_monthly_without_both_amounts_uses_base():
    schedule = TwiceMonthlySchedule(first_day=5, second_day=20, first_amount=100000)

    assert occurrence_amount(schedule, 80000, date(2025, 11, 5)) == 80000
    assert occurrence_amount(DayOfMonthSchedule(5), 80000, date(2025, 11, 5)) == 80000
