"""Late-fee calculation endpoints for debts supplied by the caller"""

import time
from datetime import datetime
from fastapi import APIRouter, Depends, Request

from tuition_gateway.api.v1.schemas import (
    EnrichedDebtSchema,
    FeePolicySchema,
    LateFeeRequest,
    LateFeeResponse,
    SummarySchema,
)
from tuition_gateway.api.dependencies import get_fee_policy, get_reference_time, get_request_id
from tuition_gateway.domain.late_fees import enrich_batch, summarize_enriched
from tuition_gateway.domain.models import FeePolicy
from tuition_gateway.infrastructure.observability.logging import log_late_fee_summary
from tuition_gateway.infrastructure.observability.metrics import record_surcharges

router = APIRouter()


@router.get("/late-fees/policy", response_model=FeePolicySchema)
def get_policy(policy: FeePolicy = Depends(get_fee_policy)):
    """Return the late-fee policy currently in force"""
    return FeePolicySchema.model_validate(policy)


@router.post("/late-fees/enrich", response_model=LateFeeResponse)
def enrich_debts(
    request_body: LateFeeRequest,
    request: Request,
    policy: FeePolicy = Depends(get_fee_policy),
    now: datetime = Depends(get_reference_time),
):
    """
    Annotate debts with overdue status and late fee.

    Debts come back in the order they were sent.
    """
    start_time = time.time()
    reference_time = request_body.reference_time or now

    enriched = enrich_batch([d.to_domain() for d in request_body.debts], policy, reference_time)
    record_surcharges(enriched)

    duration_ms = (time.time() - start_time) * 1000
    log_late_fee_summary(get_request_id(request), None, summarize_enriched(enriched), duration_ms)

    return LateFeeResponse(
        reference_time=reference_time,
        debts=[EnrichedDebtSchema.model_validate(d) for d in enriched],
    )


@router.post("/late-fees/summary", response_model=SummarySchema)
def summarize_debts(
    request_body: LateFeeRequest,
    policy: FeePolicy = Depends(get_fee_policy),
    now: datetime = Depends(get_reference_time),
):
    """Totals with late fees for a batch of debts"""
    reference_time = request_body.reference_time or now
    enriched = enrich_batch([d.to_domain() for d in request_body.debts], policy, reference_time)
    return SummarySchema.model_validate(summarize_enriched(enriched))
