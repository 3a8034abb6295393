"""Scenario accumulator - day-by-day running balances for both scenarios"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List

from cashflow_gateway.domain.events import require_cents
from cashflow_gateway.domain.exceptions import InvalidHorizonError
from cashflow_gateway.domain.models import CashEvent, DayProjection, Scenario
from cashflow_gateway.utils.date_utils import generate_date_range


def validate_horizon(horizon_days: object) -> int:
    if not isinstance(horizon_days, int) or isinstance(horizon_days, bool):
        raise InvalidHorizonError(f"Horizon must be an integer number of days, got {horizon_days!r}")
    if horizon_days <= 0:
        raise InvalidHorizonError(f"Horizon must be positive, got {horizon_days}")
    return horizon_days


def project(
    starting_optimistic: int,
    starting_pessimistic: int,
    events: Iterable[CashEvent],
    horizon_days: int,
    start_date: date,
    investment_balance: int = 0,
) -> List[DayProjection]:
    """
    Accumulate both scenarios from start_date through start_date + horizon_days.

    Returns horizon_days + 1 projections (day 0 is start_date). Each day's
    balance is the previous balance plus every applicable event dated that
    day; events outside the window are ignored. A day is in danger for a
    scenario iff its end-of-day balance is strictly negative.

    All arithmetic is on integer cents.

    Raises:
        InvalidHorizonError: horizon_days is not a positive integer
    """
    horizon_days = validate_horizon(horizon_days)
    optimistic = require_cents(starting_optimistic, "optimistic starting balance")
    pessimistic = require_cents(starting_pessimistic, "pessimistic starting balance")
    investment_balance = require_cents(investment_balance, "investment balance")

    by_date: Dict[date, List[CashEvent]] = defaultdict(list)
    for event in events:
        by_date[event.date].append(event)

    projections = []
    window = generate_date_range(start_date, start_date + timedelta(days=horizon_days))
    for offset, day in enumerate(window):
        day_events = by_date.get(day, [])

        optimistic += sum(e.amount for e in day_events if e.applies_to(Scenario.OPTIMISTIC))
        pessimistic += sum(e.amount for e in day_events if e.applies_to(Scenario.PESSIMISTIC))

        projections.append(
            DayProjection(
                date=day,
                day_offset=offset,
                optimistic_balance=optimistic,
                pessimistic_balance=pessimistic,
                investment_inclusive_balance=optimistic + investment_balance,
                is_optimistic_danger=optimistic < 0,
                is_pessimistic_danger=pessimistic < 0,
                events=list(day_events),
            )
        )

    return projections
