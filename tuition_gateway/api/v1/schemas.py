"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union

from tuition_gateway.domain.models import Debt, PaymentConcept
from tuition_gateway.utils.date_utils import as_datetime


class ConceptSchema(BaseModel):
    """Payment concept attached to a debt"""

    model_config = ConfigDict(from_attributes=True)

    name: str
    fee_exempt: bool = False


class DebtSchema(BaseModel):
    """Debt record as supplied by the billing system"""

    id: int
    student_id: int
    concept_id: int
    amount: Decimal = Field(..., ge=0, allow_inf_nan=False, description="Amount owed")
    due_date: Union[datetime, date] = Field(..., description="ISO-8601 date or timestamp")
    status: str = Field(..., min_length=1, description="pending | paid | partial | overdue | cancelled")
    concept: Optional[ConceptSchema] = None

    def to_domain(self) -> Debt:
        concept = None
        if self.concept is not None:
            concept = PaymentConcept(name=self.concept.name, fee_exempt=self.concept.fee_exempt)
        return Debt(
            id=self.id,
            student_id=self.student_id,
            concept_id=self.concept_id,
            amount=self.amount,
            due_date=as_datetime(self.due_date),
            status=self.status,
            concept=concept,
        )


class LateFeeRequest(BaseModel):
    """Request body for POST /v1/late-fees/enrich and /v1/late-fees/summary"""

    debts: List[DebtSchema]
    reference_time: Optional[datetime] = Field(None, description="Defaults to now (UTC)")


class EnrichedDebtSchema(BaseModel):
    """Debt with late-fee annotations"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    concept_id: int
    amount: Decimal
    due_date: datetime
    status: str
    concept: Optional[ConceptSchema] = None
    is_overdue: bool
    has_surcharge: bool
    surcharge_amount: Decimal
    total_with_surcharge: Decimal


class SummarySchema(BaseModel):
    """Totals over a batch of debts"""

    model_config = ConfigDict(from_attributes=True)

    total_original: Decimal
    total_surcharges: Decimal
    total_final: Decimal
    count_with_surcharge: int


class LateFeeResponse(BaseModel):
    """Response for POST /v1/late-fees/enrich"""

    reference_time: datetime
    debts: List[EnrichedDebtSchema]


class FeePolicySchema(BaseModel):
    """Active late-fee policy"""

    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    surcharge_percent: Decimal
    decimal_places: int
    rounding: str


class StudentDebtsResponse(BaseModel):
    """Response for GET /v1/students/{student_id}/debts"""

    student_id: int
    debts: List[EnrichedDebtSchema]
    summary: SummarySchema
    total_final_display: str


class AccountStatusResponse(BaseModel):
    """Response for GET /v1/students/{student_id}/account"""

    student_id: int
    total_owed: Decimal
    total_owed_display: str
    overdue_count: int
    risk_state: str
    payment_risk: str
    summary: SummarySchema


class ReminderSchema(BaseModel):
    """Reminder queued for delivery"""

    model_config = ConfigDict(from_attributes=True)

    debt_id: int
    student_id: int
    concept_name: str
    amount_due: Decimal
    due_date: datetime
    days_overdue: int
    risk_level: str
    urgent: bool


class ReminderResponse(BaseModel):
    """Response for POST /v1/students/{student_id}/reminders"""

    student_id: int
    queued: List[ReminderSchema]
    skipped_debt_ids: List[int]


class GradeCategoryResponse(BaseModel):
    """Response for GET /v1/grades/category"""

    grade: float
    normalized_grade: float
    category: str
    label: str
    description: str
