"""GET /v1/projection - Cashflow projection endpoint"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cashflow_gateway.api.dependencies import get_clock, get_finance_repository, get_request_id
from cashflow_gateway.api.v1.schemas import (
    CashEventSchema,
    ChartPointSchema,
    DangerRangeSchema,
    DayProjectionSchema,
    EstimatedTodaySchema,
    EstimationFlagsSchema,
    HealthSchema,
    ProjectionResponse,
    ScenarioSummarySchema,
    StaleEntitySchema,
    StartingBalancesSchema,
    SummarySchema,
)
from cashflow_gateway.config import settings
from cashflow_gateway.domain.estimation import EstimationFlags
from cashflow_gateway.domain.exceptions import ProjectionError
from cashflow_gateway.domain.models import CashEvent, Scenario
from cashflow_gateway.domain.projection import CashflowProjection, build_projection
from cashflow_gateway.domain.views import ScenarioSummary
from cashflow_gateway.infrastructure.database.repositories import FinanceRepository
from cashflow_gateway.infrastructure.observability.logging import log_projection
from cashflow_gateway.infrastructure.observability.metrics import projection_counter, record_projection

router = APIRouter()


def _flags(flags: EstimationFlags) -> EstimationFlagsSchema:
    return EstimationFlagsSchema(optimistic=flags.optimistic, pessimistic=flags.pessimistic, any=flags.any)


def _event(event: CashEvent) -> CashEventSchema:
    return CashEventSchema(
        date=event.date,
        amount_cents=event.amount,
        source_id=event.source_id,
        source_label=event.source_label,
        source_type=event.source_type.value,
        certainty=event.certainty.value if event.certainty else None,
        counts_optimistic=event.applies_to(Scenario.OPTIMISTIC),
        counts_pessimistic=event.applies_to(Scenario.PESSIMISTIC),
    )


def _scenario(summary: ScenarioSummary) -> ScenarioSummarySchema:
    return ScenarioSummarySchema(
        total_income_cents=summary.total_income,
        total_expenses_cents=summary.total_expenses,
        end_balance_cents=summary.end_balance,
        surplus_cents=summary.surplus,
        danger_day_count=summary.danger_day_count,
    )


def to_response(projection: CashflowProjection) -> ProjectionResponse:
    """Map the engine output onto the API contract"""
    starting = projection.starting
    estimated = projection.estimated_today
    summary = projection.summary
    health = projection.health

    return ProjectionResponse(
        start_date=projection.start_date,
        end_date=projection.end_date,
        horizon_days=projection.horizon_days,
        has_data=projection.has_data,
        starting=StartingBalancesSchema(
            optimistic_cents=starting.optimistic_start,
            pessimistic_cents=starting.pessimistic_start,
            investment_cents=starting.investment_balance,
            has_reliable_base=starting.has_reliable_base,
            is_estimated=_flags(starting.is_estimated),
            stale_account_ids=starting.stale_account_ids,
            base_date=starting.base_date,
        ),
        estimated_today=(
            EstimatedTodaySchema(
                optimistic_cents=estimated.optimistic,
                pessimistic_cents=estimated.pessimistic,
                adjusted=_flags(estimated.adjusted),
                interval_start=estimated.interval_start,
                interval_end=estimated.interval_end,
            )
            if estimated
            else None
        ),
        days=[
            DayProjectionSchema(
                date=d.date,
                day_offset=d.day_offset,
                optimistic_balance_cents=d.optimistic_balance,
                pessimistic_balance_cents=d.pessimistic_balance,
                investment_inclusive_balance_cents=d.investment_inclusive_balance,
                is_optimistic_danger=d.is_optimistic_danger,
                is_pessimistic_danger=d.is_pessimistic_danger,
                events=[_event(e) for e in d.events],
            )
            for d in projection.days
        ],
        chart=[
            ChartPointSchema(
                date=p.date,
                label=p.label,
                timestamp=p.timestamp,
                optimistic_balance_cents=p.optimistic_balance,
                pessimistic_balance_cents=p.pessimistic_balance,
                investment_inclusive_balance_cents=p.investment_inclusive_balance,
                is_optimistic_danger=p.is_optimistic_danger,
                is_pessimistic_danger=p.is_pessimistic_danger,
            )
            for p in projection.chart
        ],
        danger_ranges=[
            DangerRangeSchema(start=r.start, end=r.end, scenario=r.scenario.value) for r in projection.danger_ranges
        ],
        summary=(
            SummarySchema(
                starting_balance_cents=summary.starting_balance,
                optimistic=_scenario(summary.optimistic),
                pessimistic=_scenario(summary.pessimistic),
            )
            if summary
            else None
        ),
        health=HealthSchema(
            status=health.status,
            message=health.message,
            is_stale=health.is_stale,
            stale_entities=[StaleEntitySchema(id=s.id, name=s.name, type=s.type) for s in health.stale_entities],
            optimistic_danger_days=health.optimistic_danger_days,
            pessimistic_danger_days=health.pessimistic_danger_days,
        ),
    )


@router.get("/projection", response_model=ProjectionResponse)
def get_projection(
    request: Request,
    horizon_days: Optional[int] = Query(None, description="One of the allowed horizons (7/14/30/60/90)"),
    repo: FinanceRepository = Depends(get_finance_repository),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Compute the cashflow projection over the current entity snapshot.

    Always a full recompute: any entity change invalidates earlier results.
    Returns an empty projection (has_data = false) when no checking or
    savings balance has ever been recorded.
    """
    start_time = time.perf_counter()
    request_id = get_request_id(request)
    horizon = horizon_days if horizon_days is not None else settings.default_horizon_days

    if horizon not in settings.allowed_horizons:
        raise HTTPException(
            status_code=422,
            detail=f"horizon_days must be one of {settings.allowed_horizons}",
        )

    try:
        entities = repo.load_entities()
        projection = build_projection(
            entities,
            horizon,
            clock(),
            tz=settings.tz,
            stale_after=settings.balance_stale_after,
            roll_forward=settings.projection_roll_forward,
            health_stale_after=settings.health_stale_after,
        )
    except ProjectionError as e:
        projection_counter.labels(outcome="invalid").inc()
        logging.warning(f"Invalid projection input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration = time.perf_counter() - start_time
    record_projection(projection.has_data, projection.health.status, duration)
    log_projection(
        request_id,
        horizon,
        projection.starting.has_reliable_base,
        projection.health.optimistic_danger_days,
        projection.health.pessimistic_danger_days,
        projection.starting.is_estimated.any,
        duration * 1000,
    )

    return to_response(projection)
