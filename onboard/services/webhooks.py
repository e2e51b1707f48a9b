# onboard/services/webhooks.py
import asyncio
from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog

from onboard.core.contracts import WebhookConfig, WebhookResult
from onboard.observability.metrics import webhook_counter

logger = structlog.get_logger(__name__)


class WebhookNotifier:
    """Posts record arrays to the primary and secondary automation webhooks."""

    def __init__(self, config: WebhookConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    async def notify(self, url: str, records: List[Dict[str, Any]], target: str = "primary") -> WebhookResult:
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.post(url, json=records)
        except Exception as e:
            logger.error("webhook_error", target=target, error=str(e))
            webhook_counter.labels(target=target, result="failed").inc()
            return WebhookResult(ok=False)

        result = WebhookResult(ok=r.is_success, status=r.status_code)
        webhook_counter.labels(target=target, result="ok" if result.ok else "failed").inc()
        if not result.ok:
            logger.warning("webhook_non_success", target=target, status=r.status_code)
        return result

    async def notify_all(self, records: List[Dict[str, Any]]) -> Tuple[WebhookResult, WebhookResult]:
        """Beide webhooks tegelijk; volgorde maakt niet uit, we wachten op allebei."""
        primary, secondary = await asyncio.gather(
            self.notify(self.config.primary_url, records, target="primary"),
            self.notify(self.config.secondary_url, records, target="secondary"),
        )
        return primary, secondary
