from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from .config import Settings
from .results import IntegrationError, Result, Success, server_error
from .schemas import WebhookPayload

logger = structlog.get_logger(__name__)


async def trigger_webhook(
    http_client: httpx.AsyncClient,
    settings: Settings,
    payload: WebhookPayload,
) -> Any:
    missing = settings.missing("webhook_url", "webhook_secret")
    if missing:
        raise IntegrationError(f"Missing required configuration: {', '.join(missing)}")

    try:
        async with asyncio.timeout(settings.http_timeout_seconds):
            response = await http_client.post(
                settings.webhook_url,
                headers={"x-webhook-secret": settings.webhook_secret},
                json=payload.to_dict(),
            )
    except (TimeoutError, httpx.TimeoutException) as exc:
        raise IntegrationError("Webhook timed out") from exc
    except httpx.HTTPError as exc:
        raise IntegrationError(f"Webhook failed: {exc}") from exc

    if not response.is_success:
        raise IntegrationError(f"Webhook failed ({response.status_code}): {response.text}")
    try:
        return response.json()
    except ValueError as exc:
        raise IntegrationError(f"Webhook returned a non-JSON body ({response.status_code})") from exc


async def dispatch_claim(
    http_client: httpx.AsyncClient,
    settings: Settings,
    payload: WebhookPayload,
) -> Result[Any]:
    try:
        body = await trigger_webhook(http_client, settings, payload)
    except IntegrationError as exc:
        logger.warning("webhook_failed", error=str(exc), task_type=payload.task_type)
        return server_error(str(exc))
    logger.info("webhook_dispatched", task_type=payload.task_type, trigger_id=payload.trigger_id)
    return Success(body)
