"""Month progression - promotes this month's future statements into card balances"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from cashflow_gateway.domain.models import CreditCard, FutureStatement


@dataclass
class ProgressionPlan:
    """Changes to apply when a new month starts"""

    card_balances: Dict[str, int] = field(default_factory=dict)  # card_id -> new statement balance
    consumed_statement_ids: List[str] = field(default_factory=list)
    expired_statement_ids: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.card_balances or self.consumed_statement_ids or self.expired_statement_ids)


def needs_progression(last_check: Optional[date], today: date) -> bool:
    """Progression runs at most once per calendar month"""
    if last_check is None:
        return True
    return (last_check.year, last_check.month) != (today.year, today.month)


def plan_month_progression(
    cards: Sequence[CreditCard],
    statements: Sequence[FutureStatement],
    today: date,
) -> ProgressionPlan:
    """
    Work out which future statements become current and which have expired.

    - A statement for the current (month, year) replaces its card's
      statement balance and is consumed
    - Statements targeting an earlier month are expired
    - Statements for cards that no longer exist are left alone
    """
    plan = ProgressionPlan()
    card_ids = {c.id for c in cards}
    current = (today.year, today.month)

    for statement in statements:
        target = (statement.target_year, statement.target_month)
        if target == current and statement.credit_card_id in card_ids:
            plan.card_balances[statement.credit_card_id] = statement.amount
            plan.consumed_statement_ids.append(statement.id)
        elif target < current:
            plan.expired_statement_ids.append(statement.id)

    return plan
