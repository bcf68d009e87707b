"""Late-fee engine - surcharge calculation for overdue school debts"""

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal, localcontext
from typing import Iterable, List

from tuition_gateway.domain.models import Debt, DebtSummary, EnrichedDebt, FeePolicy
from tuition_gateway.utils.date_utils import align_timezones, as_datetime

PENDING_STATUS = "pending"


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric value to Decimal without binary float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Decimal, policy: FeePolicy) -> Decimal:
    """
    Round to the policy's minor unit.

    Default is 2 decimal places, half-up: 0.125 -> 0.13, 0.124 -> 0.12.
    NaN and infinities are returned unchanged.
    """
    if not value.is_finite():
        return value
    exponent = Decimal(1).scaleb(-policy.decimal_places)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the minor unit
        ctx.prec = max(ctx.prec, value.adjusted() + policy.decimal_places + 2)
        return value.quantize(exponent, rounding=policy.rounding)


def is_overdue(due_date: date | datetime, reference_time: date | datetime) -> bool:
    """True iff the due date is strictly earlier than the reference instant"""
    due, reference = align_timezones(as_datetime(due_date), as_datetime(reference_time))
    return due < reference


def compute_surcharge(
    amount: Decimal,
    due_date: date | datetime,
    status: str,
    policy: FeePolicy,
    fee_exempt: bool,
    reference_time: date | datetime,
) -> Decimal:
    """
    Late fee owed on a single debt.

    No surcharge when:
    - the policy is disabled
    - the payment concept is fee-exempt
    - the debt is not pending (paid, cancelled, partial...)
    - the due date has not passed yet

    Otherwise: amount * surcharge_percent / 100, rounded with round_money.
    """
    if not policy.enabled:
        return Decimal("0")
    if fee_exempt:
        return Decimal("0")
    if status != PENDING_STATUS:
        return Decimal("0")
    if not is_overdue(due_date, reference_time):
        return Decimal("0")

    surcharge = to_decimal(amount) * to_decimal(policy.surcharge_percent) / Decimal(100)
    return round_money(surcharge, policy)


def enrich(debt: Debt, policy: FeePolicy, reference_time: date | datetime) -> EnrichedDebt:
    """
    Annotate a debt with overdue status and late fee.

    Never mutates the input and never raises on odd amounts: a negative or
    NaN amount flows straight into the total. Validation happens upstream.
    """
    amount = to_decimal(debt.amount)
    surcharge = compute_surcharge(
        amount,
        debt.due_date,
        debt.status,
        policy,
        debt.fee_exempt,
        reference_time,
    )

    base = {f.name: getattr(debt, f.name) for f in fields(Debt)}
    base["amount"] = amount

    return EnrichedDebt(
        **base,
        is_overdue=is_overdue(debt.due_date, reference_time),
        has_surcharge=surcharge != 0,
        surcharge_amount=surcharge,
        total_with_surcharge=amount + surcharge,
    )


def enrich_batch(
    debts: Iterable[Debt],
    policy: FeePolicy,
    reference_time: date | datetime,
) -> List[EnrichedDebt]:
    """Enrich every debt, keeping input order"""
    return [enrich(debt, policy, reference_time) for debt in debts]


def summarize(
    debts: Iterable[Debt],
    policy: FeePolicy,
    reference_time: date | datetime,
) -> DebtSummary:
    """Totals across a batch. total_final is derived, never summed separately."""
    return summarize_enriched(enrich_batch(debts, policy, reference_time))


def summarize_enriched(enriched: List[EnrichedDebt]) -> DebtSummary:
    """Aggregate already-enriched debts"""
    total_original = sum((d.amount for d in enriched), Decimal("0"))
    total_surcharges = sum((d.surcharge_amount for d in enriched), Decimal("0"))

    return DebtSummary(
        total_original=total_original,
        total_surcharges=total_surcharges,
        total_final=total_original + total_surcharges,
        count_with_surcharge=sum(1 for d in enriched if d.has_surcharge),
    )
