"""Reminder selection for pending and overdue debts"""

from datetime import date, datetime
from typing import Iterable, List

from tuition_gateway.domain.models import EnrichedDebt, Reminder
from tuition_gateway.utils.date_utils import whole_days_between

# Unsettled statuses that still warrant a reminder
REMINDABLE_STATUSES = frozenset({"pending", "overdue", "partial"})


def days_overdue(due_date: date | datetime, reference_time: date | datetime) -> int:
    """Whole days past due; negative while the debt is not due yet"""
    return whole_days_between(due_date, reference_time)


def reminder_risk_level(days: int) -> str:
    """
    Urgency of a reminder by days past due.

    - <= 0:  low (coming due)
    - 1-15:  medium (recently overdue)
    - > 15:  high
    """
    if days <= 0:
        return "low"
    elif days <= 15:
        return "medium"
    else:
        return "high"


def select_reminders(
    debts: Iterable[EnrichedDebt],
    reference_time: date | datetime,
    lead_days: int = 3,
) -> List[Reminder]:
    """Unsettled debts (pending, overdue, partial) that are past due or fall due within lead_days"""
    reminders = []
    for debt in debts:
        if debt.status not in REMINDABLE_STATUSES:
            continue

        days = days_overdue(debt.due_date, reference_time)
        if not debt.is_overdue and -days > lead_days:
            continue

        reminders.append(
            Reminder(
                debt_id=debt.id,
                student_id=debt.student_id,
                concept_name=debt.concept.name if debt.concept else "",
                amount_due=debt.total_with_surcharge,
                due_date=debt.due_date,
                days_overdue=days,
                risk_level=reminder_risk_level(days),
                urgent=debt.is_overdue,
            )
        )

    return reminders
