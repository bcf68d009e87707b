"""Notification webhook client with exponential backoff retry logic"""

import httpx
import asyncio
from typing import Dict, Any
from tuition_gateway.config import settings
from tuition_gateway.domain.exceptions import NotificationDeliveryError
from tuition_gateway.infrastructure.observability.metrics import (
    reminder_counter,
    webhook_failure_counter,
    webhook_latency_histogram,
)


class NotificationClient:
    """Client for delivering payment reminders to the notification service"""

    def __init__(
        self,
        webhook_url: str | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        timeout: float | None = None,
    ):
        self.webhook_url = webhook_url or settings.notification_webhook_url
        self.max_retries = settings.webhook_max_retries if max_retries is None else max_retries
        self.backoff_base = settings.webhook_backoff_base if backoff_base is None else backoff_base
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout

    async def send_reminder(self, payload: Dict[str, Any]) -> None:
        """
        Send a payment reminder event with retry logic.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1) -> 1s, 2s, 4s, 8s
        - Retries on HTTP status errors and network failures

        Raises:
            NotificationDeliveryError: After max_retries failed attempts
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                    reminder_counter.labels(outcome="sent").inc()
                    return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        reminder_counter.labels(outcome="failed").inc()
                        raise NotificationDeliveryError(
                            f"Reminder delivery failed after {attempt} attempts: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
