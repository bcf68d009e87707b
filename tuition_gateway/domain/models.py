"""Domain models - pure Python dataclasses representing billing entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional


@dataclass(frozen=True)
class FeePolicy:
    """Late-fee configuration, built once at startup and passed into every calculation"""

    enabled: bool = True
    surcharge_percent: Decimal = Decimal("10")
    decimal_places: int = 2
    rounding: str = ROUND_HALF_UP


@dataclass
class PaymentConcept:
    """What a debt is charged for (tuition, enrollment, uniforms...)"""

    name: str
    fee_exempt: bool = False


@dataclass
class Debt:
    """Billing obligation owed by a student, as read from the billing store"""

    id: int
    student_id: int
    concept_id: int
    amount: Decimal
    due_date: datetime
    status: str  # pending | paid | partial | overdue | cancelled
    concept: Optional[PaymentConcept] = None

    @property
    def fee_exempt(self) -> bool:
        return bool(self.concept and self.concept.fee_exempt)


@dataclass
class EnrichedDebt(Debt):
    """Debt annotated with late-fee information. A view: never persisted as-is."""

    is_overdue: bool = False
    has_surcharge: bool = False
    surcharge_amount: Decimal = Decimal("0")
    total_with_surcharge: Decimal = Decimal("0")


@dataclass
class DebtSummary:
    """Aggregate totals over a batch of enriched debts"""

    total_original: Decimal
    total_surcharges: Decimal
    total_final: Decimal
    count_with_surcharge: int


@dataclass
class AccountStatus:
    """Outstanding balance and payment risk for one student"""

    total_owed: Decimal
    overdue_count: int
    risk_state: str  # green | yellow | red
    payment_risk: str  # green | yellow | red, by overdue count
    summary: DebtSummary
    debts: List[EnrichedDebt] = field(default_factory=list)


@dataclass
class Reminder:
    """Payment reminder due for an unsettled debt"""

    debt_id: int
    student_id: int
    concept_name: str
    amount_due: Decimal
    due_date: datetime
    days_overdue: int
    risk_level: str  # low | medium | high
    urgent: bool
