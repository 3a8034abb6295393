"""Derived views - chart points, danger ranges and summary statistics"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import List, Optional, Sequence

from cashflow_gateway.domain.models import DayProjection, Scenario


@dataclass
class ChartPoint:
    date: date
    label: str  # e.g. "Nov 26"
    timestamp: int  # UTC midnight, seconds since epoch
    optimistic_balance: int
    pessimistic_balance: int
    investment_inclusive_balance: int
    is_optimistic_danger: bool
    is_pessimistic_danger: bool


@dataclass
class DangerRange:
    start: date
    end: date
    scenario: Scenario


@dataclass
class ScenarioSummary:
    total_income: int
    total_expenses: int  # positive magnitude
    end_balance: int
    surplus: int  # end_balance - starting balance
    danger_day_count: int


@dataclass
class SummaryStats:
    starting_balance: int
    optimistic: ScenarioSummary
    pessimistic: ScenarioSummary


def format_chart_label(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def build_chart_data(projections: Sequence[DayProjection]) -> List[ChartPoint]:
    return [
        ChartPoint(
            date=p.date,
            label=format_chart_label(p.date),
            timestamp=int(datetime.combine(p.date, time(), tzinfo=timezone.utc).timestamp()),
            optimistic_balance=p.optimistic_balance,
            pessimistic_balance=p.pessimistic_balance,
            investment_inclusive_balance=p.investment_inclusive_balance,
            is_optimistic_danger=p.is_optimistic_danger,
            is_pessimistic_danger=p.is_pessimistic_danger,
        )
        for p in projections
    ]


def _classify(projection: DayProjection) -> Optional[Scenario]:
    if projection.is_optimistic_danger and projection.is_pessimistic_danger:
        return Scenario.BOTH
    if projection.is_optimistic_danger:
        return Scenario.OPTIMISTIC
    if projection.is_pessimistic_danger:
        return Scenario.PESSIMISTIC
    return None


def build_danger_ranges(projections: Sequence[DayProjection]) -> List[DangerRange]:
    """
    Merge consecutive danger days into ranges.

    Days where both scenarios are negative are tagged "both". A change of
    classification closes the current range, so adjacent spans of different
    scenarios stay separate.
    """
    ranges: List[DangerRange] = []
    current: Optional[DangerRange] = None

    for projection in projections:
        scenario = _classify(projection)

        if scenario is None:
            if current:
                ranges.append(current)
                current = None
            continue

        if current and current.scenario == scenario:
            current.end = projection.date
        else:
            if current:
                ranges.append(current)
            current = DangerRange(start=projection.date, end=projection.date, scenario=scenario)

    if current:
        ranges.append(current)

    return ranges


def _summarize(projections: Sequence[DayProjection], scenario: Scenario, starting_balance: int) -> ScenarioSummary:
    total_income = 0
    total_expenses = 0
    danger_days = 0

    for p in projections:
        for event in p.events:
            if not event.applies_to(scenario):
                continue
            if event.amount > 0:
                total_income += event.amount
            else:
                total_expenses -= event.amount

        if scenario == Scenario.OPTIMISTIC:
            danger_days += p.is_optimistic_danger
        else:
            danger_days += p.is_pessimistic_danger

    if projections:
        last = projections[-1]
        end_balance = last.optimistic_balance if scenario == Scenario.OPTIMISTIC else last.pessimistic_balance
    else:
        end_balance = starting_balance

    return ScenarioSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        end_balance=end_balance,
        surplus=end_balance - starting_balance,
        danger_day_count=danger_days,
    )


def build_summary_stats(
    projections: Sequence[DayProjection],
    starting_balance: int,
    pessimistic_starting_balance: Optional[int] = None,
) -> SummaryStats:
    """
    Straight sums over the horizon, per scenario.

    The pessimistic surplus is measured against pessimistic_starting_balance
    when the two scenarios start from different estimates.
    """
    if pessimistic_starting_balance is None:
        pessimistic_starting_balance = starting_balance

    return SummaryStats(
        starting_balance=starting_balance,
        optimistic=_summarize(projections, Scenario.OPTIMISTIC, starting_balance),
        pessimistic=_summarize(projections, Scenario.PESSIMISTIC, pessimistic_starting_balance),
    )
