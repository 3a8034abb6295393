"""Recurrence expansion - turns a payment schedule into concrete occurrence dates"""

from datetime import date, timedelta
from typing import List

from cashflow_gateway.domain.exceptions import InvalidScheduleError
from cashflow_gateway.domain.models import (
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    Frequency,
    OneOffSchedule,
    PaymentSchedule,
    TwiceMonthlySchedule,
)
from cashflow_gateway.utils.date_utils import clamp_day, iter_months, sunday_based_weekday

# Which schedule shape each frequency accepts
SCHEDULE_FOR_FREQUENCY = {
    Frequency.MONTHLY: DayOfMonthSchedule,
    Frequency.WEEKLY: DayOfWeekSchedule,
    Frequency.BIWEEKLY: DayOfWeekSchedule,
    Frequency.TWICE_MONTHLY: TwiceMonthlySchedule,
    Frequency.ONCE: OneOffSchedule,
}


def _check_day_of_month(value: object, field_name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 31:
        raise InvalidScheduleError(f"{field_name} must be an integer between 1 and 31, got {value!r}")


def validate_schedule(schedule: PaymentSchedule, frequency: Frequency) -> None:
    """
    Check that a schedule is well formed for its frequency.

    Raises:
        InvalidScheduleError: On shape/frequency mismatch or out-of-range values
    """
    try:
        frequency = Frequency(frequency)
    except ValueError as e:
        raise InvalidScheduleError(f"Unknown frequency: {frequency!r}") from e

    expected = SCHEDULE_FOR_FREQUENCY[frequency]
    if not isinstance(schedule, expected):
        raise InvalidScheduleError(
            f"Frequency '{frequency.value}' requires a {expected.__name__}, got {type(schedule).__name__}"
        )

    if isinstance(schedule, DayOfMonthSchedule):
        _check_day_of_month(schedule.day_of_month, "day_of_month")
    elif isinstance(schedule, DayOfWeekSchedule):
        dow = schedule.day_of_week
        if not isinstance(dow, int) or isinstance(dow, bool) or not 0 <= dow <= 6:
            raise InvalidScheduleError(f"day_of_week must be an integer between 0 and 6, got {dow!r}")
    elif isinstance(schedule, TwiceMonthlySchedule):
        _check_day_of_month(schedule.first_day, "first_day")
        _check_day_of_month(schedule.second_day, "second_day")
    elif not isinstance(schedule.date, date):
        raise InvalidScheduleError(f"One-off schedule needs a date, got {schedule.date!r}")


def expand(
    schedule: PaymentSchedule,
    frequency: Frequency,
    range_start: date,
    range_end: date,
) -> List[date]:
    """
    Expand a payment schedule into the ordered occurrence dates in [range_start, range_end].

    Rules:
    - Day-of-month days are clamped to the month length (31 -> Feb 28/29)
    - Weekly emits every matching weekday; biweekly every 14 days starting
      from the first matching weekday on/after range_start
    - Twice-monthly emits both days each month, once if they clamp to the same date
    - One-off emits its own date when it falls in range

    Raises:
        InvalidScheduleError: Malformed schedule or inverted range
    """
    validate_schedule(schedule, frequency)
    if range_end < range_start:
        raise InvalidScheduleError(f"Range end {range_end} is before range start {range_start}")

    frequency = Frequency(frequency)

    if isinstance(schedule, OneOffSchedule):
        return [schedule.date] if range_start <= schedule.date <= range_end else []

    if isinstance(schedule, DayOfWeekSchedule):
        offset = (schedule.day_of_week - sunday_based_weekday(range_start)) % 7
        first = range_start + timedelta(days=offset)
        step = timedelta(days=14 if frequency == Frequency.BIWEEKLY else 7)
        dates = []
        current = first
        while current <= range_end:
            dates.append(current)
            current += step
        return dates

    if isinstance(schedule, DayOfMonthSchedule):
        days = [schedule.day_of_month]
    else:
        days = [schedule.first_day, schedule.second_day]

    dates = []
    for month_start in iter_months(range_start, range_end):
        in_month = sorted({clamp_day(month_start.year, month_start.month, d) for d in days})
        dates.extend(d for d in in_month if range_start <= d <= range_end)
    return dates


def occurrence_amount(schedule: PaymentSchedule, base_amount: int, on: date) -> int:
    """
    Amount paid on a given occurrence.

    Twice-monthly schedules with both variable amounts set pay first_amount on
    the first day and second_amount on the second; everything else pays base_amount.
    """
    if (
        isinstance(schedule, TwiceMonthlySchedule)
        and schedule.first_amount is not None
        and schedule.second_amount is not None
    ):
        if on == clamp_day(on.year, on.month, schedule.first_day):
            return schedule.first_amount
        if on == clamp_day(on.year, on.month, schedule.second_day):
            return schedule.second_amount
    return base_amount
