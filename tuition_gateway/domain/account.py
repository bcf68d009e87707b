"""Student account status - outstanding balance and payment risk"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from tuition_gateway.domain.late_fees import enrich_batch, summarize_enriched
from tuition_gateway.domain.models import AccountStatus, Debt, FeePolicy

SETTLED_STATUSES = frozenset({"paid", "cancelled"})


def evaluate_payment_risk(overdue_count: int) -> str:
    """
    Map a number of overdue debts to a traffic-light risk state.

    - 0:   green (up to date)
    - 1-2: yellow (needs attention)
    - 3+:  red (at risk)
    """
    if overdue_count == 0:
        return "green"
    elif overdue_count <= 2:
        return "yellow"
    else:
        return "red"


def build_account_status(
    debts: Iterable[Debt],
    policy: FeePolicy,
    reference_time: date | datetime,
) -> AccountStatus:
    """
    Summarize what a student still owes.

    Only unsettled debts count. Risk state:
    - green: nothing owed
    - red: at least one owed debt is past due
    - yellow: debts owed, none past due yet

    payment_risk grades the same account by how many debts are overdue
    (see evaluate_payment_risk).
    """
    owed = [d for d in debts if d.status not in SETTLED_STATUSES]
    enriched = enrich_batch(owed, policy, reference_time)
    summary = summarize_enriched(enriched)

    overdue_count = sum(1 for d in enriched if d.is_overdue)
    total_owed = summary.total_original

    if total_owed == Decimal("0"):
        risk_state = "green"
    elif overdue_count > 0:
        risk_state = "red"
    else:
        risk_state = "yellow"

    return AccountStatus(
        total_owed=total_owed,
        overdue_count=overdue_count,
        risk_state=risk_state,
        payment_risk=evaluate_payment_risk(overdue_count),
        summary=summary,
        debts=enriched,
    )
