"""Health indicator - projection status plus stale-data warnings"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from cashflow_gateway.domain.estimation import is_balance_stale
from cashflow_gateway.domain.models import Account, CreditCard
from cashflow_gateway.domain.views import SummaryStats

HEALTH_STALE_AFTER = timedelta(days=30)


@dataclass
class StaleEntity:
    id: str
    name: str
    type: str  # "account" | "card"


@dataclass
class HealthIndicator:
    status: str  # "good" | "warning" | "danger"
    message: str
    optimistic_danger_days: int
    pessimistic_danger_days: int
    stale_entities: List[StaleEntity] = field(default_factory=list)

    @property
    def is_stale(self) -> bool:
        return bool(self.stale_entities)


def health_status(optimistic_danger_days: int, pessimistic_danger_days: int) -> str:
    """Danger when even the best case goes negative, warning when only the worst case does"""
    if optimistic_danger_days > 0:
        return "danger"
    if pessimistic_danger_days > 0:
        return "warning"
    return "good"


def _plural(count: int) -> str:
    return f"{count} danger day{'s' if count != 1 else ''}"


def health_message(status: str, optimistic_danger_days: int, pessimistic_danger_days: int) -> str:
    if status == "danger":
        return f"{_plural(optimistic_danger_days)} even in best-case scenario"
    if status == "warning":
        return f"{_plural(pessimistic_danger_days)} in worst-case scenario"
    return "No issues detected"


def find_stale_entities(
    accounts: Sequence[Account],
    cards: Sequence[CreditCard],
    now: datetime,
    stale_after: timedelta = HEALTH_STALE_AFTER,
    tz: Optional[ZoneInfo] = None,
) -> List[StaleEntity]:
    stale = [
        StaleEntity(id=a.id, name=a.name, type="account")
        for a in accounts
        if is_balance_stale(a.balance_updated_at, now, stale_after, tz)
    ]
    stale.extend(
        StaleEntity(id=c.id, name=c.name, type="card")
        for c in cards
        if is_balance_stale(c.balance_updated_at, now, stale_after, tz)
    )
    return stale


def evaluate_health(
    summary: Optional[SummaryStats],
    accounts: Sequence[Account],
    cards: Sequence[CreditCard],
    now: datetime,
    stale_after: timedelta = HEALTH_STALE_AFTER,
    tz: Optional[ZoneInfo] = None,
) -> HealthIndicator:
    stale = find_stale_entities(accounts, cards, now, stale_after, tz)

    if summary is None:
        return HealthIndicator(
            status="good",
            message="No data available",
            optimistic_danger_days=0,
            pessimistic_danger_days=0,
            stale_entities=stale,
        )

    optimistic_days = summary.optimistic.danger_day_count
    pessimistic_days = summary.pessimistic.danger_day_count
    status = health_status(optimistic_days, pessimistic_days)

    return HealthIndicator(
        status=status,
        message=health_message(status, optimistic_days, pessimistic_days),
        optimistic_danger_days=optimistic_days,
        pessimistic_danger_days=pessimistic_days,
        stale_entities=stale,
    )
