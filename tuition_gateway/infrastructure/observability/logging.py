"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from tuition_gateway.domain.models import DebtSummary


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "tuition-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_late_fee_summary(
    request_id: str,
    student_id: int | None,
    summary: DebtSummary,
    duration_ms: float,
) -> None:
    """Log one structured record per late-fee calculation"""
    logging.info(
        "Late fees calculated",
        extra={
            "request_id": request_id,
            "student_id": student_id,
            "step": "late_fee_summary",
            "total_original": str(summary.total_original),
            "total_surcharges": str(summary.total_surcharges),
            "count_with_surcharge": summary.count_with_surcharge,
            "duration_ms": duration_ms,
        },
    )


def log_reminders_queued(request_id: str, student_id: int, queued: int, skipped: int) -> None:
    """Log reminder scheduling outcome"""
    logging.info(
        "Reminders queued",
        extra={
            "request_id": request_id,
            "student_id": student_id,
            "step": "reminders_queued",
            "queued": queued,
            "skipped_recently_sent": skipped,
        },
    )
