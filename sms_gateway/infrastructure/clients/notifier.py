"""Review webhook client with exponential backoff retry logic"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from sms_gateway.config import settings
from sms_gateway.domain.exceptions import NotificationDeliveryError
from sms_gateway.infrastructure.observability.metrics import webhook_failure_counter, webhook_latency_histogram

logger = logging.getLogger(__name__)

PENDING_REVIEW_EVENT = "TRANSACTION_PENDING_REVIEW"


class ReviewNotifier:
    """Tells the review surface that a transaction waits for approval"""

    def __init__(self, webhook_url: Optional[str] = None):
        self.webhook_url = webhook_url or settings.review_webhook_url
        self.timeout = settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_pending_review(self, payload: Dict[str, Any]) -> None:
        """
        Post a pending-review event, retrying with exponential backoff.

        Retry strategy:
        - Backoff of base * 2^(attempt - 1) seconds between attempts
        - Retries on 5xx errors and network failures; 4xx responses fail at once
        - Tracks latency histogram and failure counter

        Without a configured webhook URL the event is only logged.
        """
        event = {"event": PENDING_REVIEW_EVENT, **payload}
        if not self.webhook_url:
            logger.info(
                "No review webhook configured, skipping notification",
                extra={"transaction_id": payload.get("transaction_id")},
            )
            return

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=event)
                        response.raise_for_status()
                        return

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    webhook_failure_counter.inc()
                    if e.response.status_code < 500 or attempt >= self.max_retries:
                        raise NotificationDeliveryError(
                            f"Review webhook returned {e.response.status_code}"
                        ) from e

                except httpx.RequestError as e:
                    attempt += 1
                    webhook_failure_counter.inc()
                    if attempt >= self.max_retries:
                        raise NotificationDeliveryError(f"Review webhook unreachable: {e}") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

    async def notify(self, payload: Dict[str, Any]) -> None:
        """Background-task entry point: delivery failures are logged, never raised"""
        try:
            await self.send_pending_review(payload)
        except NotificationDeliveryError as e:
            logger.error(
                f"Review notification failed: {e}",
                extra={"transaction_id": payload.get("transaction_id")},
            )
