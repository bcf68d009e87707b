"""Boundary checks applied to debt records before they reach the late-fee engine"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from tuition_gateway.domain.exceptions import DebtValidationError
from tuition_gateway.domain.models import Debt
from tuition_gateway.utils.date_utils import as_datetime


def parse_due_date(value: object) -> datetime:
    """Accept date, datetime or ISO-8601 text ("2025-04-15", "2025-04-15T08:00:00Z")"""
    if isinstance(value, (date, datetime)):
        return as_datetime(value)
    if isinstance(value, str) and value:
        try:
            return as_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError as e:
            raise DebtValidationError(f"Invalid due date: {value!r}") from e
    raise DebtValidationError(f"Missing or unsupported due date: {value!r}")


def parse_amount(value: object) -> Decimal:
    """Finite, non-negative decimal amount"""
    if isinstance(value, bool) or value is None:
        raise DebtValidationError(f"Invalid amount: {value!r}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise DebtValidationError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise DebtValidationError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise DebtValidationError(f"Amount must not be negative, got {value!r}")
    return amount


def validate_debt(debt: Debt) -> Debt:
    """
    Reject debts the calculator would silently turn into nonsense.

    Returns a copy with amount as Decimal and due_date as datetime.

    Raises:
        DebtValidationError: NaN/negative amount, missing due date or status
    """
    if not debt.status:
        raise DebtValidationError(f"Debt {debt.id} has no status")

    return Debt(
        id=debt.id,
        student_id=debt.student_id,
        concept_id=debt.concept_id,
        amount=parse_amount(debt.amount),
        due_date=parse_due_date(debt.due_date),
        status=debt.status,
        concept=debt.concept,
    )
