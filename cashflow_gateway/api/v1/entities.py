"""CRUD endpoints for finance entities - every mutation emits a change event"""

import logging
from datetime import datetime
from typing import Callable, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response

from cashflow_gateway.api.dependencies import get_change_notifier, get_clock, get_finance_repository, get_request_id
from cashflow_gateway.api.v1.schemas import (
    AccountCreate,
    AccountResponse,
    BalanceUpdate,
    BalancesConfirmedResponse,
    CreditCardCreate,
    CreditCardResponse,
    FixedExpenseCreate,
    FixedExpenseResponse,
    FutureStatementCreate,
    FutureStatementResponse,
    ProjectCreate,
    ProjectResponse,
    SingleShotExpenseCreate,
    SingleShotExpenseResponse,
    SingleShotIncomeCreate,
    SingleShotIncomeResponse,
    StatementUpdate,
)
from cashflow_gateway.domain.changes import EntityChange
from cashflow_gateway.domain.exceptions import (
    ChangeNotificationError,
    DuplicateFutureStatementError,
    EntityNotFoundError,
    InvalidScheduleError,
)
from cashflow_gateway.domain.models import Frequency
from cashflow_gateway.domain.recurrence import validate_schedule
from cashflow_gateway.infrastructure.clients.notifier import ChangeNotifier
from cashflow_gateway.infrastructure.database.repositories import (
    FinanceRepository,
    account_to_domain,
    credit_card_to_domain,
    fixed_expense_to_domain,
    future_statement_to_domain,
    schedule_from_json,
    schedule_to_json,
    single_shot_expense_to_domain,
    single_shot_income_to_domain,
)
from cashflow_gateway.infrastructure.observability.logging import log_entity_change
from cashflow_gateway.infrastructure.observability.metrics import record_entity_change

router = APIRouter()


async def publish_change(notifier: ChangeNotifier, change: EntityChange) -> None:
    """Background delivery; a failed webhook never undoes the committed change"""
    try:
        await notifier.send_change_event(change)
    except ChangeNotificationError as e:
        logging.error(f"Change notification failed: {e}", extra=change.to_payload())


def commit_change(
    repo: FinanceRepository,
    background_tasks: BackgroundTasks,
    notifier: ChangeNotifier,
    request: Request,
    clock: Callable[[], datetime],
    entity_type: str,
    entity_id: str,
    action: str,
) -> None:
    """Commit the unit of work, then announce the change"""
    repo.db.commit()
    change = EntityChange(entity_type=entity_type, entity_id=entity_id, action=action, occurred_at=clock())
    record_entity_change(entity_type, action)
    log_entity_change(get_request_id(request), entity_type, entity_id, action)
    background_tasks.add_task(publish_change, notifier, change)


def _account_response(record) -> AccountResponse:
    account = account_to_domain(record)
    return AccountResponse(
        id=account.id,
        name=account.name,
        type=account.type.value,
        balance_cents=account.balance,
        balance_updated_at=account.balance_updated_at,
        owner_id=account.owner_id,
    )


def _project_response(record) -> ProjectResponse:
    return ProjectResponse(
        id=str(record.id),
        name=record.name,
        amount_cents=record.amount_cents,
        frequency=record.frequency,
        payment_schedule=record.payment_schedule,
        certainty=record.certainty,
        is_active=record.is_active,
    )


def _single_shot_income_response(record) -> SingleShotIncomeResponse:
    income = single_shot_income_to_domain(record)
    return SingleShotIncomeResponse(
        id=income.id,
        name=income.name,
        amount_cents=income.amount,
        date=income.date,
        certainty=income.certainty.value,
    )


def _fixed_expense_response(record) -> FixedExpenseResponse:
    expense = fixed_expense_to_domain(record)
    return FixedExpenseResponse(
        id=expense.id,
        name=expense.name,
        amount_cents=expense.amount,
        due_day=expense.due_day,
        is_active=expense.is_active,
    )


def _single_shot_expense_response(record) -> SingleShotExpenseResponse:
    expense = single_shot_expense_to_domain(record)
    return SingleShotExpenseResponse(id=expense.id, name=expense.name, amount_cents=expense.amount, date=expense.date)


def _credit_card_response(record) -> CreditCardResponse:
    card = credit_card_to_domain(record)
    return CreditCardResponse(
        id=card.id,
        name=card.name,
        statement_balance_cents=card.statement_balance,
        due_day=card.due_day,
        owner_id=card.owner_id,
        balance_updated_at=card.balance_updated_at,
    )


def _future_statement_response(record) -> FutureStatementResponse:
    statement = future_statement_to_domain(record)
    return FutureStatementResponse(
        id=statement.id,
        credit_card_id=statement.credit_card_id,
        target_month=statement.target_month,
        target_year=statement.target_year,
        amount_cents=statement.amount,
    )


def _not_found(e: EntityNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


# === Accounts ===


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(
    body: AccountCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    record = repo.accounts.create(
        name=body.name,
        type=body.type,
        balance_cents=body.balance_cents,
        balance_updated_at=body.balance_updated_at,
        owner_id=body.owner_id,
    )
    commit_change(repo, background_tasks, notifier, request, clock, "account", str(record.id), "created")
    return _account_response(record)


@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_account_response(r) for r in repo.accounts.list()]


@router.patch("/accounts/{account_id}/balance", response_model=AccountResponse)
def update_account_balance(
    account_id: str,
    body: BalanceUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Quick update: record a confirmed balance, stamped with the current time"""
    try:
        record = repo.update_account_balance(account_id, body.balance_cents, clock())
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "account", account_id, "updated")
    return _account_response(record)


@router.delete("/accounts/{account_id}", status_code=204)
def delete_account(
    account_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.accounts.delete(account_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "account", account_id, "deleted")
    return Response(status_code=204)


# === Recurring income ===


@router.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(
    body: ProjectCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Create a recurring income; the schedule kind must match the frequency"""
    schedule_json = body.payment_schedule.model_dump()
    try:
        schedule = schedule_from_json(schedule_json)
        validate_schedule(schedule, Frequency(body.frequency))
    except InvalidScheduleError as e:
        raise HTTPException(status_code=422, detail=str(e))

    record = repo.projects.create(
        name=body.name,
        amount_cents=body.amount_cents,
        frequency=body.frequency,
        payment_schedule=schedule_to_json(schedule),
        certainty=body.certainty,
        is_active=body.is_active,
    )
    commit_change(repo, background_tasks, notifier, request, clock, "project", str(record.id), "created")
    return _project_response(record)


@router.get("/projects", response_model=List[ProjectResponse])
def list_projects(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_project_response(r) for r in repo.projects.list()]


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(
    project_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.projects.delete(project_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "project", project_id, "deleted")
    return Response(status_code=204)


@router.post("/single-shot-incomes", response_model=SingleShotIncomeResponse, status_code=201)
def create_single_shot_income(
    body: SingleShotIncomeCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    record = repo.single_shot_incomes.create(
        name=body.name, amount_cents=body.amount_cents, date=body.date, certainty=body.certainty
    )
    commit_change(repo, background_tasks, notifier, request, clock, "single_shot_income", str(record.id), "created")
    return _single_shot_income_response(record)


@router.get("/single-shot-incomes", response_model=List[SingleShotIncomeResponse])
def list_single_shot_incomes(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_single_shot_income_response(r) for r in repo.single_shot_incomes.list()]


@router.delete("/single-shot-incomes/{income_id}", status_code=204)
def delete_single_shot_income(
    income_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.single_shot_incomes.delete(income_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "single_shot_income", income_id, "deleted")
    return Response(status_code=204)


# === Expenses ===


@router.post("/expenses", response_model=FixedExpenseResponse, status_code=201)
def create_fixed_expense(
    body: FixedExpenseCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    record = repo.fixed_expenses.create(
        name=body.name, amount_cents=body.amount_cents, due_day=body.due_day, is_active=body.is_active
    )
    commit_change(repo, background_tasks, notifier, request, clock, "fixed_expense", str(record.id), "created")
    return _fixed_expense_response(record)


@router.get("/expenses", response_model=List[FixedExpenseResponse])
def list_fixed_expenses(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_fixed_expense_response(r) for r in repo.fixed_expenses.list()]


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_fixed_expense(
    expense_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.fixed_expenses.delete(expense_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "fixed_expense", expense_id, "deleted")
    return Response(status_code=204)


@router.post("/single-shot-expenses", response_model=SingleShotExpenseResponse, status_code=201)
def create_single_shot_expense(
    body: SingleShotExpenseCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    record = repo.single_shot_expenses.create(name=body.name, amount_cents=body.amount_cents, date=body.date)
    commit_change(repo, background_tasks, notifier, request, clock, "single_shot_expense", str(record.id), "created")
    return _single_shot_expense_response(record)


@router.get("/single-shot-expenses", response_model=List[SingleShotExpenseResponse])
def list_single_shot_expenses(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_single_shot_expense_response(r) for r in repo.single_shot_expenses.list()]


@router.delete("/single-shot-expenses/{expense_id}", status_code=204)
def delete_single_shot_expense(
    expense_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.single_shot_expenses.delete(expense_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "single_shot_expense", expense_id, "deleted")
    return Response(status_code=204)


# === Credit cards ===


@router.post("/credit-cards", response_model=CreditCardResponse, status_code=201)
def create_credit_card(
    body: CreditCardCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    record = repo.credit_cards.create(
        name=body.name,
        statement_balance_cents=body.statement_balance_cents,
        due_day=body.due_day,
        owner_id=body.owner_id,
        balance_updated_at=clock(),
    )
    commit_change(repo, background_tasks, notifier, request, clock, "credit_card", str(record.id), "created")
    return _credit_card_response(record)


@router.get("/credit-cards", response_model=List[CreditCardResponse])
def list_credit_cards(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_credit_card_response(r) for r in repo.credit_cards.list()]


@router.patch("/credit-cards/{card_id}/statement", response_model=CreditCardResponse)
def update_card_statement(
    card_id: str,
    body: StatementUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        record = repo.update_card_statement(card_id, body.statement_balance_cents, clock())
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "credit_card", card_id, "updated")
    return _credit_card_response(record)


@router.delete("/credit-cards/{card_id}", status_code=204)
def delete_credit_card(
    card_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.credit_cards.delete(card_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "credit_card", card_id, "deleted")
    return Response(status_code=204)


@router.post("/future-statements", response_model=FutureStatementResponse, status_code=201)
def create_future_statement(
    body: FutureStatementCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Pre-enter a known bill for a card; one per card and month"""
    try:
        record = repo.create_future_statement(
            body.credit_card_id, body.target_month, body.target_year, body.amount_cents
        )
    except EntityNotFoundError as e:
        raise _not_found(e)
    except DuplicateFutureStatementError as e:
        repo.db.rollback()
        raise HTTPException(status_code=409, detail=str(e))
    commit_change(repo, background_tasks, notifier, request, clock, "future_statement", str(record.id), "created")
    return _future_statement_response(record)


@router.get("/future-statements", response_model=List[FutureStatementResponse])
def list_future_statements(repo: FinanceRepository = Depends(get_finance_repository)):
    return [_future_statement_response(r) for r in repo.future_statements.list()]


@router.delete("/future-statements/{statement_id}", status_code=204)
def delete_future_statement(
    statement_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        repo.future_statements.delete(statement_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    commit_change(repo, background_tasks, notifier, request, clock, "future_statement", statement_id, "deleted")
    return Response(status_code=204)


# === Bulk confirmation ===


@router.post("/balances/confirm-all", response_model=BalancesConfirmedResponse)
def confirm_all_balances(
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Mark every account and card balance as confirmed now, leaving the values as they are"""
    confirmed_at = clock()
    accounts, cards = repo.confirm_all_balances(confirmed_at)
    repo.db.commit()

    request_id = get_request_id(request)
    changed = [("account", str(r.id)) for r in accounts] + [("credit_card", str(r.id)) for r in cards]
    for entity_type, entity_id in changed:
        record_entity_change(entity_type, "updated")
        log_entity_change(request_id, entity_type, entity_id, "updated")
        change = EntityChange(entity_type=entity_type, entity_id=entity_id, action="updated", occurred_at=confirmed_at)
        background_tasks.add_task(publish_change, notifier, change)

    return BalancesConfirmedResponse(accounts=len(accounts), credit_cards=len(cards), confirmed_at=confirmed_at)
