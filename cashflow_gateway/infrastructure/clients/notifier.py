"""Change webhook client with exponential backoff retry logic"""

import asyncio
import logging
from typing import Optional

import httpx

from cashflow_gateway.config import settings
from cashflow_gateway.domain.changes import EntityChange
from cashflow_gateway.domain.exceptions import ChangeNotificationError
from cashflow_gateway.infrastructure.observability.metrics import webhook_failure_counter, webhook_latency_histogram

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """Publishes FINANCE_DATA_CHANGED events so subscribers recompute their projection"""

    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        self.webhook_url = webhook_url or settings.change_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_change_event(self, change: EntityChange) -> None:
        """
        Deliver one change event.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on 5xx errors and network failures
        - Tracks latency histogram and failure counter

        Raises:
            ChangeNotificationError: All attempts failed
        """
        if not self.webhook_url:
            logger.debug("No change webhook configured, dropping event", extra=change.to_payload())
            return

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=change.to_payload())
                        response.raise_for_status()
                        return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500:
                        raise ChangeNotificationError(f"Change webhook rejected event: {e.response.status_code}") from e

                    if attempt >= self.max_retries:
                        raise ChangeNotificationError(
                            f"Change webhook failed after {attempt} attempts: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
