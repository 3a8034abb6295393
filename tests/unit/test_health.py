"""Unit tests for the health indicator"""

import pytest
from datetime import datetime
from zoneinfo import ZoneInfo
from cashflow_gateway.domain.models import Account, AccountType, CreditCard
from cashflow_gateway.domain.health import evaluate_health, health_message, health_status
from cashflow_gateway.domain.views import ScenarioSummary, SummaryStats

TZ = ZoneInfo("America/Sao_Paulo")
NOW = datetime(2025, 11, 10, 9, 30, tzinfo=TZ)


def _summary(optimistic_days: int, pessimistic_days: int) -> SummaryStats:
    return SummaryStats(
        starting_balance=0,
        optimistic=ScenarioSummary(0, 0, 0, 0, optimistic_days),
        pessimistic=ScenarioSummary(0, 0, 0, 0, pessimistic_days),
    )


@pytest.mark.parametrize(
    "optimistic_days,pessimistic_days,expected",
    [
        (0, 0, "good"),
        (0, 3, "warning"),
        (2, 5, "danger"),
    ],
)
def test_health_status(optimistic_days, pessimistic_days, expected):
    assert health_status(optimistic_days, pessimistic_days) == expected


def test_health_messages():
    assert health_message("danger", 1, 4) == "1 danger day even in best-case scenario"
    assert health_message("warning", 0, 4) == "4 danger days in worst-case scenario"
    assert health_message("good", 0, 0) == "No issues detected"


def test_stale_accounts_and_cards_reported():
    accounts = [
        Account("a1", "Checking", AccountType.CHECKING, 100, balance_updated_at=datetime(2025, 11, 9, tzinfo=TZ)),
        Account("a2", "Old savings", AccountType.SAVINGS, 100, balance_updated_at=datetime(2025, 9, 1, tzinfo=TZ)),
    ]
    cards = [CreditCard("c1", "Visa", 5000, 10, balance_updated_at=None)]

    health = evaluate_health(_summary(0, 0), accounts, cards, NOW, tz=TZ)

    assert health.status == "good"
    assert health.is_stale is True
    assert [(s.id, s.type) for s in health.stale_entities] == [("a2", "account"), ("c1", "card")]


def test_no_summary_means_no_data():
    health = evaluate_health(None, [], [], NOW, tz=TZ)

    assert health.message == "No data available"
    assert health.is_stale is False
