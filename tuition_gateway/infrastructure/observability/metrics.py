"""Prometheus metrics for late fees, reminders and webhook performance"""

from decimal import Decimal
from typing import Iterable

from prometheus_client import Counter, Histogram

from tuition_gateway.domain.models import EnrichedDebt

# Late-fee metrics
surcharge_counter = Counter(
    "tuition_surcharges_applied_total",
    "Debts that accrued a late fee",
)

surcharge_amount_histogram = Histogram(
    "tuition_surcharge_amount",
    "Late fee amounts applied, in currency units",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000],
)

# Reminder metrics
reminder_counter = Counter(
    "tuition_reminders_total",
    "Payment reminders by delivery outcome",
    ["outcome"],  # sent | failed
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Notification webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_surcharges(debts: Iterable[EnrichedDebt]) -> None:
    """Record every finite surcharge in a calculated batch"""
    for debt in debts:
        if debt.has_surcharge and debt.surcharge_amount.is_finite() and debt.surcharge_amount > Decimal("0"):
            surcharge_counter.inc()
            surcharge_amount_histogram.observe(float(debt.surcharge_amount))
