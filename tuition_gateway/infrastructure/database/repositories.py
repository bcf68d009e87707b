"""Data access layer for billing entities"""

from datetime import datetime, timedelta
from typing import List
from sqlalchemy.orm import Session, joinedload
from tuition_gateway.infrastructure.database.models import DebtRecord, PaymentReminderRecord
from tuition_gateway.domain.models import Debt, PaymentConcept, Reminder
from tuition_gateway.domain.validation import validate_debt

# Reminders that block a resend within the cooldown window
ACTIVE_REMINDER_STATUSES = ("queued", "sent")


class DebtRepository:
    """Repository for student debts"""

    def __init__(self, db: Session):
        self.db = db

    def get_debts_by_student(self, student_id: int) -> List[Debt]:
        """
        Fetch a student's debts, oldest due date first.

        Raises:
            DebtValidationError: If a stored row cannot be priced
        """
        records = (
            self.db.query(DebtRecord)
            .options(joinedload(DebtRecord.concept))
            .filter(DebtRecord.student_id == student_id)
            .order_by(DebtRecord.due_date.asc(), DebtRecord.id.asc())
            .all()
        )
        return [validate_debt(self._to_domain(record)) for record in records]

    @staticmethod
    def _to_domain(record: DebtRecord) -> Debt:
        concept = None
        if record.concept is not None:
            concept = PaymentConcept(name=record.concept.name, fee_exempt=bool(record.concept.fee_exempt))

        return Debt(
            id=record.id,
            student_id=record.student_id,
            concept_id=record.concept_id,
            amount=record.amount,
            due_date=record.due_date,
            status=record.status,
            concept=concept,
        )


class ReminderRepository:
    """Repository for sent payment reminders"""

    def __init__(self, db: Session):
        self.db = db

    def was_recently_sent(self, debt_id: int, since: datetime) -> bool:
        """True if a reminder for this debt was queued or delivered at or after `since`; failed ones do not count"""
        return (
            self.db.query(PaymentReminderRecord.id)
            .filter(
                PaymentReminderRecord.debt_id == debt_id,
                PaymentReminderRecord.sent_at >= since,
                PaymentReminderRecord.status.in_(ACTIVE_REMINDER_STATUSES),
            )
            .first()
            is not None
        )

    def record_reminder(self, reminder: Reminder, sent_at: datetime) -> PaymentReminderRecord:
        """Persist a reminder as queued; delivery outcome is set later by mark_delivery"""
        db_reminder = PaymentReminderRecord(
            debt_id=reminder.debt_id,
            student_id=reminder.student_id,
            risk_level=reminder.risk_level,
            status="queued",
            sent_at=sent_at,
        )
        self.db.add(db_reminder)
        self.db.flush()
        return db_reminder

    def mark_delivery(self, reminder_id: int, status: str) -> None:
        """Set the delivery outcome (sent | failed) of a queued reminder"""
        self.db.query(PaymentReminderRecord).filter(PaymentReminderRecord.id == reminder_id).update(
            {"status": status}, synchronize_session=False
        )

    @staticmethod
    def cooldown_start(now: datetime, cooldown_hours: int) -> datetime:
        return now - timedelta(hours=cooldown_hours)
