"""Cashflow projection - main entry point wiring the engine stages together"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from cashflow_gateway.domain.accumulator import project, validate_horizon
from cashflow_gateway.domain.estimation import (
    DEFAULT_STALE_AFTER,
    EstimatedToday,
    StartingBalances,
    estimate_today,
    resolve_starting_balances,
)
from cashflow_gateway.domain.events import materialize
from cashflow_gateway.domain.health import HEALTH_STALE_AFTER, HealthIndicator, evaluate_health
from cashflow_gateway.domain.models import DayProjection, FinanceEntities
from cashflow_gateway.domain.views import (
    ChartPoint,
    DangerRange,
    SummaryStats,
    build_chart_data,
    build_danger_ranges,
    build_summary_stats,
)


@dataclass
class CashflowProjection:
    """Complete projection output consumed by the presentation layer"""

    start_date: date
    end_date: date
    horizon_days: int
    starting: StartingBalances
    health: HealthIndicator
    estimated_today: Optional[EstimatedToday] = None
    days: List[DayProjection] = field(default_factory=list)
    chart: List[ChartPoint] = field(default_factory=list)
    danger_ranges: List[DangerRange] = field(default_factory=list)
    summary: Optional[SummaryStats] = None

    @property
    def has_data(self) -> bool:
        return bool(self.days)


def build_projection(
    entities: FinanceEntities,
    horizon_days: int,
    now: datetime,
    tz: Optional[ZoneInfo] = None,
    stale_after: timedelta = DEFAULT_STALE_AFTER,
    roll_forward: bool = True,
    health_stale_after: timedelta = HEALTH_STALE_AFTER,
) -> CashflowProjection:
    """
    Compute the projection from an entity snapshot and an injected clock.

    Flow:
    1. Resolve day-0 balances from account balances
    2. Optionally carry them over events missed since the last balance update
    3. Materialize events from today through today + horizon_days
    4. Accumulate both scenarios and derive chart, ranges, summary and health

    Without a reliable base the result has no days (empty state).
    Identical inputs always produce identical output.

    Raises:
        InvalidHorizonError, InvalidScheduleError, InvalidAmountError
    """
    horizon_days = validate_horizon(horizon_days)
    starting = resolve_starting_balances(entities.accounts, now, stale_after, tz)
    today = starting.today
    end_date = today + timedelta(days=horizon_days)

    if not starting.has_reliable_base:
        return CashflowProjection(
            start_date=today,
            end_date=end_date,
            horizon_days=horizon_days,
            starting=starting,
            health=evaluate_health(None, entities.accounts, entities.credit_cards, now, health_stale_after, tz),
        )

    estimated = None
    optimistic_start = starting.optimistic_start
    pessimistic_start = starting.pessimistic_start
    statement_as_of = today

    if roll_forward:
        estimated = estimate_today(entities, starting, today)
        optimistic_start = estimated.optimistic
        pessimistic_start = estimated.pessimistic
        # Card statements already due inside the carried-over interval must not be charged again
        statement_as_of = min(starting.base_date + timedelta(days=1), today)

    events = materialize(entities, today, end_date, statement_as_of=statement_as_of)
    days = project(
        optimistic_start,
        pessimistic_start,
        events,
        horizon_days,
        today,
        investment_balance=starting.investment_balance,
    )
    summary = build_summary_stats(days, optimistic_start, pessimistic_start)

    return CashflowProjection(
        start_date=today,
        end_date=end_date,
        horizon_days=horizon_days,
        starting=starting,
        health=evaluate_health(summary, entities.accounts, entities.credit_cards, now, health_stale_after, tz),
        estimated_today=estimated,
        days=days,
        chart=build_chart_data(days),
        danger_ranges=build_danger_ranges(days),
        summary=summary,
    )
