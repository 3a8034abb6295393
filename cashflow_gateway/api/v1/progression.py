"""POST /v1/month-progression - roll pre-entered card statements into the new month"""

import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from cashflow_gateway.api.dependencies import get_change_notifier, get_clock, get_finance_repository, get_request_id
from cashflow_gateway.api.v1.entities import publish_change
from cashflow_gateway.api.v1.schemas import ProgressionResponse
from cashflow_gateway.domain.changes import EntityChange
from cashflow_gateway.domain.exceptions import EntityNotFoundError
from cashflow_gateway.domain.month_progression import needs_progression, plan_month_progression
from cashflow_gateway.infrastructure.clients.notifier import ChangeNotifier
from cashflow_gateway.infrastructure.database.repositories import FinanceRepository
from cashflow_gateway.infrastructure.observability.logging import log_entity_change
from cashflow_gateway.infrastructure.observability.metrics import month_progression_counter, record_entity_change

router = APIRouter()


@router.post("/month-progression", response_model=ProgressionResponse)
def run_month_progression(
    request: Request,
    background_tasks: BackgroundTasks,
    repo: FinanceRepository = Depends(get_finance_repository),
    notifier: ChangeNotifier = Depends(get_change_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Run month progression at most once per calendar month.

    Future statements targeting the current month replace their card's
    statement balance; statements for past months are discarded. Every
    touched card and statement emits a change event after commit.
    """
    request_id = get_request_id(request)
    now = clock()
    today = now.date()

    if not needs_progression(repo.last_progression_run(), today):
        return ProgressionResponse(ran=False, promoted_cards=0, consumed_statements=0, expired_statements=0)

    entities = repo.load_entities()
    plan = plan_month_progression(entities.credit_cards, entities.future_statements, today)

    try:
        repo.apply_progression(plan, today)
        repo.db.commit()
    except EntityNotFoundError as e:
        repo.db.rollback()
        logging.error(f"Month progression failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        repo.db.rollback()
        logging.error(f"Unexpected month progression error: {e}", extra={"request_id": request_id})
        raise

    changed = [("credit_card", card_id, "updated") for card_id in plan.card_balances]
    changed += [
        ("future_statement", statement_id, "deleted")
        for statement_id in plan.consumed_statement_ids + plan.expired_statement_ids
    ]
    for entity_type, entity_id, action in changed:
        record_entity_change(entity_type, action)
        log_entity_change(request_id, entity_type, entity_id, action)
        change = EntityChange(entity_type=entity_type, entity_id=entity_id, action=action, occurred_at=now)
        background_tasks.add_task(publish_change, notifier, change)

    month_progression_counter.labels(kind="promoted").inc(len(plan.card_balances))
    month_progression_counter.labels(kind="expired").inc(len(plan.expired_statement_ids))
    logging.info(
        "Month progression applied",
        extra={
            "request_id": request_id,
            "step": "month_progression",
            "run_on": today.isoformat(),
            "promoted_cards": len(plan.card_balances),
            "expired_statements": len(plan.expired_statement_ids),
        },
    )

    return ProgressionResponse(
        ran=True,
        promoted_cards=len(plan.card_balances),
        consumed_statements=len(plan.consumed_statement_ids),
        expired_statements=len(plan.expired_statement_ids),
    )
