"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone
from fastapi import Request
from tuition_gateway.domain.models import FeePolicy
from tuition_gateway.infrastructure.clients.notifications import NotificationClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_fee_policy(request: Request) -> FeePolicy:
    """Late-fee policy loaded once by the app factory"""
    return request.app.state.fee_policy


def get_reference_time() -> datetime:
    """Current instant used for overdue checks"""
    return datetime.now(timezone.utc)


def get_notification_client() -> NotificationClient:
    """Provide notification webhook client instance"""
    return NotificationClient()
