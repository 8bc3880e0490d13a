"""Change notification webhook client with exponential backoff retry logic"""

import httpx
import asyncio
from typing import Dict, Any
from gold_ledger.config import settings
from gold_ledger.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter

CUSTOMER_CHANGED = "CUSTOMER_CHANGED"
CUSTOMER_DELETED = "CUSTOMER_DELETED"


def change_event(event: str, customer_id: str, debt_id: str | None = None, operation: str | None = None) -> Dict[str, Any]:
    """Build the payload announcing a committed write to one customer"""
    payload: Dict[str, Any] = {"event": event, "customer_id": customer_id}
    if debt_id is not None:
        payload["debt_id"] = debt_id
    if operation is not None:
        payload["operation"] = operation
    return payload


class SyncClient:
    """Publishes customer change events to the sync collaborator"""

    def __init__(self, webhook_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.webhook_url = webhook_url or settings.sync_webhook_url
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def publish(self, payload: Dict[str, Any]) -> None:
        """
        Send a change event with retry logic.

        Retry strategy:
        - Exponential backoff between attempts: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on 5xx errors and network failures; 4xx fails at once
        - Tracks latency histogram and failure counter

        Args:
            payload: Event data, e.g. {"event": "CUSTOMER_CHANGED", "customer_id": ...}
        """
        if not self.enabled:
            return

        attempt = 0
        async with httpx.AsyncClient(transport=self.transport) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(
                            self.webhook_url,
                            json=payload,
                            timeout=10.0,
                        )
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500:
                        raise

                    if attempt >= self.max_retries:
                        # Final failure after all retries
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
