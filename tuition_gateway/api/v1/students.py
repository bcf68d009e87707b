"""Per-student billing endpoints backed by the debt store"""

import time
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Tuple
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session, sessionmaker

from tuition_gateway.api.v1.schemas import (
    AccountStatusResponse,
    EnrichedDebtSchema,
    ReminderResponse,
    ReminderSchema,
    StudentDebtsResponse,
    SummarySchema,
)
from tuition_gateway.api.dependencies import (
    get_fee_policy,
    get_notification_client,
    get_reference_time,
    get_request_id,
)
from tuition_gateway.config import settings
from tuition_gateway.domain.account import build_account_status
from tuition_gateway.domain.exceptions import DebtValidationError, NotificationDeliveryError
from tuition_gateway.domain.formatting import format_currency
from tuition_gateway.domain.late_fees import enrich_batch, summarize_enriched
from tuition_gateway.domain.models import FeePolicy, Reminder
from tuition_gateway.domain.reminders import select_reminders
from tuition_gateway.infrastructure.clients.notifications import NotificationClient
from tuition_gateway.infrastructure.database.repositories import DebtRepository, ReminderRepository
from tuition_gateway.infrastructure.database.session import get_db, get_session_factory
from tuition_gateway.infrastructure.observability.logging import log_late_fee_summary, log_reminders_queued
from tuition_gateway.infrastructure.observability.metrics import record_surcharges

router = APIRouter()


def _load_debts(db: Session, student_id: int, request_id: str):
    try:
        return DebtRepository(db).get_debts_by_student(student_id)
    except DebtValidationError as e:
        logging.warning(f"Invalid stored debt: {e}", extra={"request_id": request_id, "student_id": student_id})
        raise HTTPException(status_code=422, detail=str(e))


def _reminder_payload(reminder: Reminder) -> Dict[str, Any]:
    payload = asdict(reminder)
    payload["event"] = "PAYMENT_REMINDER"
    payload["amount_due"] = str(reminder.amount_due)
    payload["amount_due_display"] = format_currency(reminder.amount_due)
    payload["due_date"] = reminder.due_date.isoformat()
    return payload


async def deliver_reminders(
    client: NotificationClient,
    deliveries: List[Tuple[int, Dict[str, Any]]],
    session_factory: sessionmaker,
) -> None:
    """
    Background task: send each queued reminder and store its outcome.

    Runs after the request session is closed, so it opens its own. A failed
    reminder is marked failed and no longer blocks the next run.
    """
    db = session_factory()
    try:
        reminder_repo = ReminderRepository(db)
        for reminder_id, payload in deliveries:
            try:
                await client.send_reminder(payload)
                reminder_repo.mark_delivery(reminder_id, "sent")
            except NotificationDeliveryError as e:
                reminder_repo.mark_delivery(reminder_id, "failed")
                logging.error(f"Reminder delivery failed: {e}", extra={"debt_id": payload["debt_id"]})
            db.commit()
    finally:
        db.close()


@router.get("/students/{student_id}/debts", response_model=StudentDebtsResponse)
def get_student_debts(
    student_id: int,
    request: Request,
    db: Session = Depends(get_db),
    policy: FeePolicy = Depends(get_fee_policy),
    now: datetime = Depends(get_reference_time),
):
    """
    Student debts with late fees applied as of now.

    Returns:
        Enriched debts (oldest due date first) and their totals
    """
    start_time = time.time()
    request_id = get_request_id(request)

    enriched = enrich_batch(_load_debts(db, student_id, request_id), policy, now)
    summary = summarize_enriched(enriched)
    record_surcharges(enriched)

    duration_ms = (time.time() - start_time) * 1000
    log_late_fee_summary(request_id, student_id, summary, duration_ms)

    return StudentDebtsResponse(
        student_id=student_id,
        debts=[EnrichedDebtSchema.model_validate(d) for d in enriched],
        summary=SummarySchema.model_validate(summary),
        total_final_display=format_currency(summary.total_final),
    )


@router.get("/students/{student_id}/account", response_model=AccountStatusResponse)
def get_account_status(
    student_id: int,
    request: Request,
    db: Session = Depends(get_db),
    policy: FeePolicy = Depends(get_fee_policy),
    now: datetime = Depends(get_reference_time),
):
    """Outstanding balance and traffic-light payment risk"""
    status = build_account_status(_load_debts(db, student_id, get_request_id(request)), policy, now)

    return AccountStatusResponse(
        student_id=student_id,
        total_owed=status.total_owed,
        total_owed_display=format_currency(status.total_owed),
        overdue_count=status.overdue_count,
        risk_state=status.risk_state,
        payment_risk=status.payment_risk,
        summary=SummarySchema.model_validate(status.summary),
    )


@router.post("/students/{student_id}/reminders", response_model=ReminderResponse)
def queue_reminders(
    student_id: int,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    policy: FeePolicy = Depends(get_fee_policy),
    now: datetime = Depends(get_reference_time),
    notification_client: NotificationClient = Depends(get_notification_client),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Queue payment reminders for a student's pending debts.

    Flow:
    1. Load and enrich debts (amounts include late fees)
    2. Select overdue debts and those coming due soon
    3. Skip debts reminded within the cooldown window
    4. Record the rest as queued and deliver them in the background
    """
    request_id = get_request_id(request)

    try:
        enriched = enrich_batch(_load_debts(db, student_id, request_id), policy, now)
        candidates = select_reminders(enriched, now, lead_days=settings.reminder_lead_days)

        reminder_repo = ReminderRepository(db)
        since = ReminderRepository.cooldown_start(now, settings.reminder_cooldown_hours)

        queued: List[Reminder] = []
        deliveries: List[Tuple[int, Dict[str, Any]]] = []
        skipped: List[int] = []
        for reminder in candidates:
            if reminder_repo.was_recently_sent(reminder.debt_id, since):
                skipped.append(reminder.debt_id)
                continue
            db_reminder = reminder_repo.record_reminder(reminder, sent_at=now)
            deliveries.append((db_reminder.id, _reminder_payload(reminder)))
            queued.append(reminder)

        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if deliveries:
        background_tasks.add_task(deliver_reminders, notification_client, deliveries, session_factory)

    log_reminders_queued(request_id, student_id, len(queued), len(skipped))

    return ReminderResponse(
        student_id=student_id,
        queued=[ReminderSchema.model_validate(r) for r in queued],
        skipped_debt_ids=skipped,
    )
