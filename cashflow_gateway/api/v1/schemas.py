"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

AccountTypeLiteral = Literal["checking", "savings", "investment"]
CertaintyLiteral = Literal["guaranteed", "probable", "uncertain"]
FrequencyLiteral = Literal["weekly", "biweekly", "twice-monthly", "monthly"]

Name = Annotated[str, Field(min_length=1, max_length=100)]
DayOfMonth = Annotated[int, Field(ge=1, le=31, description="Day of month, clamped to month length")]


# === Payment schedules (tagged by "kind") ===


class DayOfMonthScheduleSchema(BaseModel):
    kind: Literal["dayOfMonth"]
    day_of_month: DayOfMonth


class DayOfWeekScheduleSchema(BaseModel):
    kind: Literal["dayOfWeek"]
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")


class TwiceMonthlyScheduleSchema(BaseModel):
    kind: Literal["twiceMonthly"]
    first_day: DayOfMonth
    second_day: DayOfMonth
    first_amount: Optional[int] = Field(None, gt=0)
    second_amount: Optional[int] = Field(None, gt=0)


PaymentScheduleSchema = Annotated[
    Union[DayOfMonthScheduleSchema, DayOfWeekScheduleSchema, TwiceMonthlyScheduleSchema],
    Field(discriminator="kind"),
]


# === Accounts ===


class AccountCreate(BaseModel):
    """Request body for POST /v1/accounts"""

    name: Name
    type: AccountTypeLiteral
    balance_cents: int = Field(..., description="May be negative (overdraft)")
    balance_updated_at: Optional[datetime] = None
    owner_id: Optional[str] = None


class BalanceUpdate(BaseModel):
    """Request body for PATCH /v1/accounts/{id}/balance"""

    balance_cents: int


class AccountResponse(BaseModel):
    id: str
    name: str
    type: AccountTypeLiteral
    balance_cents: int
    balance_updated_at: Optional[datetime] = None
    owner_id: Optional[str] = None


# === Income ===


class ProjectCreate(BaseModel):
    """Request body for POST /v1/projects"""

    name: Name
    amount_cents: int = Field(..., gt=0)
    frequency: FrequencyLiteral
    payment_schedule: PaymentScheduleSchema
    certainty: CertaintyLiteral
    is_active: bool = True


class ProjectResponse(BaseModel):
    id: str
    name: str
    amount_cents: int
    frequency: FrequencyLiteral
    payment_schedule: PaymentScheduleSchema
    certainty: CertaintyLiteral
    is_active: bool


class SingleShotIncomeCreate(BaseModel):
    name: Name
    amount_cents: int = Field(..., gt=0)
    date: date
    certainty: CertaintyLiteral


class SingleShotIncomeResponse(SingleShotIncomeCreate):
    id: str


# === Expenses ===


class FixedExpenseCreate(BaseModel):
    name: Name
    amount_cents: int = Field(..., gt=0)
    due_day: DayOfMonth
    is_active: bool = True


class FixedExpenseResponse(FixedExpenseCreate):
    id: str


class SingleShotExpenseCreate(BaseModel):
    name: Name
    amount_cents: int = Field(..., gt=0)
    date: date


class SingleShotExpenseResponse(SingleShotExpenseCreate):
    id: str


# === Credit cards ===


class CreditCardCreate(BaseModel):
    name: Name
    statement_balance_cents: int = Field(..., ge=0)
    due_day: DayOfMonth
    owner_id: Optional[str] = None


class StatementUpdate(BaseModel):
    """Request body for PATCH /v1/credit-cards/{id}/statement"""

    statement_balance_cents: int = Field(..., ge=0)


class CreditCardResponse(CreditCardCreate):
    id: str
    balance_updated_at: Optional[datetime] = None


class FutureStatementCreate(BaseModel):
    credit_card_id: str
    target_month: int = Field(..., ge=1, le=12)
    target_year: int = Field(..., ge=2020)
    amount_cents: int = Field(..., ge=0, description="Zero means no bill expected that month")


class FutureStatementResponse(FutureStatementCreate):
    id: str


# === Projection ===


class EstimationFlagsSchema(BaseModel):
    optimistic: bool
    pessimistic: bool
    any: bool


class StartingBalancesSchema(BaseModel):
    optimistic_cents: int
    pessimistic_cents: int
    investment_cents: int
    has_reliable_base: bool
    is_estimated: EstimationFlagsSchema
    stale_account_ids: List[str]
    base_date: Optional[date] = None


class EstimatedTodaySchema(BaseModel):
    optimistic_cents: int
    pessimistic_cents: int
    adjusted: EstimationFlagsSchema
    interval_start: Optional[date] = None
    interval_end: Optional[date] = None


class CashEventSchema(BaseModel):
    date: date
    amount_cents: int
    source_id: str
    source_label: str
    source_type: Literal["income", "expense", "credit_card"]
    certainty: Optional[CertaintyLiteral] = None
    counts_optimistic: bool
    counts_pessimistic: bool


class DayProjectionSchema(BaseModel):
    date: date
    day_offset: int
    optimistic_balance_cents: int
    pessimistic_balance_cents: int
    investment_inclusive_balance_cents: int
    is_optimistic_danger: bool
    is_pessimistic_danger: bool
    events: List[CashEventSchema]


class ChartPointSchema(BaseModel):
    date: date
    label: str
    timestamp: int
    optimistic_balance_cents: int
    pessimistic_balance_cents: int
    investment_inclusive_balance_cents: int
    is_optimistic_danger: bool
    is_pessimistic_danger: bool


class DangerRangeSchema(BaseModel):
    start: date
    end: date
    scenario: Literal["optimistic", "pessimistic", "both"]


class ScenarioSummarySchema(BaseModel):
    total_income_cents: int
    total_expenses_cents: int
    end_balance_cents: int
    surplus_cents: int
    danger_day_count: int


class SummarySchema(BaseModel):
    starting_balance_cents: int
    optimistic: ScenarioSummarySchema
    pessimistic: ScenarioSummarySchema


class StaleEntitySchema(BaseModel):
    id: str
    name: str
    type: Literal["account", "card"]


class HealthSchema(BaseModel):
    status: Literal["good", "warning", "danger"]
    message: str
    is_stale: bool
    stale_entities: List[StaleEntitySchema]
    optimistic_danger_days: int
    pessimistic_danger_days: int


class ProjectionResponse(BaseModel):
    """Response for GET /v1/projection"""

    start_date: date
    end_date: date
    horizon_days: int
    has_data: bool
    starting: StartingBalancesSchema
    estimated_today: Optional[EstimatedTodaySchema] = None
    days: List[DayProjectionSchema]
    chart: List[ChartPointSchema]
    danger_ranges: List[DangerRangeSchema]
    summary: Optional[SummarySchema] = None
    health: HealthSchema


class BalancesConfirmedResponse(BaseModel):
    """Response for POST /v1/balances/confirm-all"""

    accounts: int
    credit_cards: int
    confirmed_at: datetime


# === Month progression ===


class ProgressionResponse(BaseModel):
    """Response for POST /v1/month-progression"""

    ran: bool
    promoted_cards: int
    consumed_statements: int
    expired_statements: int
