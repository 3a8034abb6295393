"""Domain models - pure Python dataclasses representing finance entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    TWICE_MONTHLY = "twice-monthly"
    MONTHLY = "monthly"
    ONCE = "once"  # single-shot records


class Certainty(str, Enum):
    GUARANTEED = "guaranteed"
    PROBABLE = "probable"
    UNCERTAIN = "uncertain"


class SourceType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    CREDIT_CARD = "credit_card"


class Scenario(str, Enum):
    OPTIMISTIC = "optimistic"
    PESSIMISTIC = "pessimistic"
    BOTH = "both"


# Payment schedules: closed tagged union, validated by recurrence.validate_schedule


@dataclass(frozen=True)
class DayOfMonthSchedule:
    day_of_month: int
    kind: str = "dayOfMonth"


@dataclass(frozen=True)
class DayOfWeekSchedule:
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    kind: str = "dayOfWeek"


@dataclass(frozen=True)
class TwiceMonthlySchedule:
    first_day: int
    second_day: int
    first_amount: Optional[int] = None
    second_amount: Optional[int] = None
    kind: str = "twiceMonthly"


@dataclass(frozen=True)
class OneOffSchedule:
    date: date
    kind: str = "oneOff"


PaymentSchedule = Union[DayOfMonthSchedule, DayOfWeekSchedule, TwiceMonthlySchedule, OneOffSchedule]


@dataclass
class Account:
    """Bank account with its last known balance"""

    id: str
    name: str
    type: AccountType
    balance: int  # cents, may be negative (overdraft)
    balance_updated_at: Optional[datetime] = None
    owner_id: Optional[str] = None


@dataclass
class RecurringIncome:
    """Recurring income source (a "project")"""

    id: str
    name: str
    amount: int
    frequency: Frequency
    payment_schedule: PaymentSchedule
    certainty: Certainty
    is_active: bool = True


@dataclass
class SingleShotIncome:
    id: str
    name: str
    amount: int
    date: date
    certainty: Certainty


@dataclass
class FixedExpense:
    """Monthly expense due on due_day (clamped to month length)"""

    id: str
    name: str
    amount: int
    due_day: int
    is_active: bool = True


@dataclass
class SingleShotExpense:
    id: str
    name: str
    amount: int
    date: date


@dataclass
class CreditCard:
    """Credit card whose statement balance is due on due_day"""

    id: str
    name: str
    statement_balance: int
    due_day: int
    owner_id: Optional[str] = None
    balance_updated_at: Optional[datetime] = None


@dataclass
class FutureStatement:
    """User-entered bill for a card in a specific future month"""

    id: str
    credit_card_id: str
    target_month: int
    target_year: int
    amount: int


@dataclass
class FinanceEntities:
    """Snapshot of every entity the projection reads"""

    accounts: List[Account] = field(default_factory=list)
    projects: List[RecurringIncome] = field(default_factory=list)
    single_shot_incomes: List[SingleShotIncome] = field(default_factory=list)
    fixed_expenses: List[FixedExpense] = field(default_factory=list)
    single_shot_expenses: List[SingleShotExpense] = field(default_factory=list)
    credit_cards: List[CreditCard] = field(default_factory=list)
    future_statements: List[FutureStatement] = field(default_factory=list)


@dataclass(frozen=True)
class ScenarioMask:
    optimistic: bool
    pessimistic: bool


@dataclass(frozen=True)
class CashEvent:
    """Dated cash movement. Amount is signed: positive income, negative expense."""

    date: date
    amount: int
    scenario_mask: ScenarioMask
    source_id: str
    source_label: str
    source_type: SourceType
    certainty: Optional[Certainty] = None

    def applies_to(self, scenario: Scenario) -> bool:
        if scenario == Scenario.OPTIMISTIC:
            return self.scenario_mask.optimistic
        return self.scenario_mask.pessimistic


@dataclass
class DayProjection:
    """Balances for one projected day"""

    date: date
    day_offset: int
    optimistic_balance: int
    pessimistic_balance: int
    investment_inclusive_balance: int
    is_optimistic_danger: bool
    is_pessimistic_danger: bool
    events: List[CashEvent] = field(default_factory=list)

    @property
    def income_events(self) -> List[CashEvent]:
        return [e for e in self.events if e.amount > 0]

    @property
    def expense_events(self) -> List[CashEvent]:
        return [e for e in self.events if e.amount < 0]
