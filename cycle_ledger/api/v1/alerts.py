"""GET /v1/alerts and reminder acknowledgement endpoints"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from cycle_ledger.api.v1.schemas import (
    AlertSchema,
    AlertsResponse,
    HandledReminderSchema,
    HandledRemindersResponse,
    ReminderActionRequest,
)
from cycle_ledger.api.dependencies import get_request_id, get_store_client, get_today, load_snapshot
from cycle_ledger.domain.alerts import generate_alerts
from cycle_ledger.domain.models import HandledReminder
from cycle_ledger.infrastructure.clients.store import StoreClient
from cycle_ledger.infrastructure.database.repositories import HandledReminderRepository
from cycle_ledger.infrastructure.database.session import get_db
from cycle_ledger.infrastructure.observability.logging import log_alerts_evaluated
from cycle_ledger.infrastructure.observability.metrics import record_alerts
from cycle_ledger.utils.date_utils import month_year_key

router = APIRouter()

_alert_adapter = TypeAdapter(AlertSchema)


@router.get("/alerts", response_model=AlertsResponse)
async def get_alerts(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
    store_client: StoreClient = Depends(get_store_client),
):
    """
    Evaluate budget, bill, goal and cycle-settlement alerts for today.

    Alerts the user already completed or dismissed are left out.
    """
    request_id = get_request_id(request)
    snapshot = await load_snapshot(store_client, user_id, request_id)

    handled = HandledReminderRepository(db).list_for_user(user_id)
    try:
        alerts = generate_alerts(snapshot, today, handled)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_alerts(alerts)

    log_alerts_evaluated(request_id, user_id, alerts, handled_count=len(handled))

    return AlertsResponse(
        user_id=user_id,
        as_of=today,
        alerts=[_alert_adapter.validate_python(asdict(a)) for a in alerts],
    )


@router.post("/alerts/actions", response_model=HandledReminderSchema)
def record_reminder_action(
    request_body: ReminderActionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Mark an alert COMPLETED or DISMISSED for a month (default: current month)"""
    reminder = HandledReminder(
        reminder_id=request_body.reminder_id,
        month_year=request_body.month_year or month_year_key(date.today()),
        action=request_body.action,
    )
    HandledReminderRepository(db).record_action(request_body.user_id, reminder)
    db.commit()

    logging.info(
        "Reminder handled",
        extra={
            "request_id": get_request_id(request),
            "user_id": request_body.user_id,
            "reminder_id": reminder.reminder_id,
            "month_year": reminder.month_year,
            "action": reminder.action,
        },
    )
    return HandledReminderSchema(**asdict(reminder))


@router.get("/alerts/handled", response_model=HandledRemindersResponse)
def get_handled_reminders(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """List every acknowledgement recorded for a user"""
    handled: List[HandledReminder] = HandledReminderRepository(db).list_for_user(user_id)
    return HandledRemindersResponse(
        user_id=user_id,
        handled=[HandledReminderSchema(**asdict(h)) for h in handled],
    )
