"""Starting balance resolution and balance freshness"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from cashflow_gateway.domain.events import materialize, require_cents
from cashflow_gateway.domain.models import Account, AccountType, FinanceEntities, Scenario

CONTRIBUTING_TYPES = (AccountType.CHECKING, AccountType.SAVINGS)
DEFAULT_STALE_AFTER = timedelta(days=1)


@dataclass(frozen=True)
class EstimationFlags:
    optimistic: bool = False
    pessimistic: bool = False

    @property
    def any(self) -> bool:
        return self.optimistic or self.pessimistic


@dataclass
class StartingBalances:
    """Day-0 anchor for a projection"""

    optimistic_start: int
    pessimistic_start: int
    investment_balance: int
    has_reliable_base: bool
    is_estimated: EstimationFlags
    stale_account_ids: List[str] = field(default_factory=list)
    today: Optional[date] = None
    base_date: Optional[date] = None  # earliest balance update among checking/savings


@dataclass
class EstimatedToday:
    """Starting balances carried forward over the events missed since the base date"""

    optimistic: int
    pessimistic: int
    adjusted: EstimationFlags
    interval_start: Optional[date] = None
    interval_end: Optional[date] = None


def as_local_naive(moment: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Wall-clock time of `moment` in `tz`. Naive datetimes are taken as already local."""
    if moment.tzinfo is not None:
        if tz is not None:
            moment = moment.astimezone(tz)
        moment = moment.replace(tzinfo=None)
    return moment


def is_balance_stale(
    updated_at: Optional[datetime],
    now: datetime,
    stale_after: timedelta = DEFAULT_STALE_AFTER,
    tz: Optional[ZoneInfo] = None,
) -> bool:
    """
    A balance is stale when it wasn't updated within the last `stale_after`
    calendar days, counting today. With the default of one day anything
    older than the start of today is stale. Missing timestamps are stale.
    """
    if updated_at is None:
        return True
    today = as_local_naive(now, tz).date()
    cutoff = datetime.combine(today, time()) + timedelta(days=1) - stale_after
    return as_local_naive(updated_at, tz) < cutoff


def resolve_starting_balances(
    accounts: Sequence[Account],
    now: datetime,
    stale_after: timedelta = DEFAULT_STALE_AFTER,
    tz: Optional[ZoneInfo] = None,
) -> StartingBalances:
    """
    Resolve the day-0 balances for both scenarios.

    - Starting balance is the sum of checking and savings balances as last
      recorded; no interest or accrual is interpolated
    - Investment accounts are kept out of both scenarios and reported separately
    - A reliable base needs at least one checking/savings account with a
      recorded update; without it callers must show an empty state
    - A scenario is estimated when any contributing balance is stale
    """
    contributing = [a for a in accounts if AccountType(a.type) in CONTRIBUTING_TYPES]
    investments = [a for a in accounts if AccountType(a.type) == AccountType.INVESTMENT]

    starting = sum(require_cents(a.balance, f"account {a.name}") for a in contributing)
    investment_balance = sum(require_cents(a.balance, f"account {a.name}") for a in investments)

    stale_ids = [a.id for a in accounts if is_balance_stale(a.balance_updated_at, now, stale_after, tz)]
    contributing_stale = any(a.id in stale_ids for a in contributing)

    update_dates = [
        as_local_naive(a.balance_updated_at, tz).date() for a in contributing if a.balance_updated_at is not None
    ]

    return StartingBalances(
        optimistic_start=starting,
        pessimistic_start=starting,
        investment_balance=investment_balance,
        has_reliable_base=bool(update_dates),
        is_estimated=EstimationFlags(optimistic=contributing_stale, pessimistic=contributing_stale),
        stale_account_ids=stale_ids,
        today=as_local_naive(now, tz).date(),
        base_date=min(update_dates) if update_dates else None,
    )


def estimate_today(entities: FinanceEntities, starting: StartingBalances, today: date) -> EstimatedToday:
    """
    Carry the starting balances forward over events scheduled strictly between
    the base date and today. Today's own events are left to the projection.
    """
    unchanged = EstimatedToday(
        optimistic=starting.optimistic_start,
        pessimistic=starting.pessimistic_start,
        adjusted=EstimationFlags(),
    )
    if not starting.has_reliable_base or starting.base_date is None:
        return unchanged

    interval_start = starting.base_date + timedelta(days=1)
    interval_end = today - timedelta(days=1)
    if interval_start > interval_end:
        return unchanged

    events = materialize(entities, interval_start, interval_end, statement_as_of=interval_start)
    optimistic_events = [e for e in events if e.applies_to(Scenario.OPTIMISTIC)]
    pessimistic_events = [e for e in events if e.applies_to(Scenario.PESSIMISTIC)]

    return EstimatedToday(
        optimistic=starting.optimistic_start + sum(e.amount for e in optimistic_events),
        pessimistic=starting.pessimistic_start + sum(e.amount for e in pessimistic_events),
        adjusted=EstimationFlags(optimistic=bool(optimistic_events), pessimistic=bool(pessimistic_events)),
        interval_start=interval_start,
        interval_end=interval_end,
    )
