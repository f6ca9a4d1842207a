from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from .config import Settings
from .results import IntegrationError, Result, Success, server_error
from .schemas import FileAttachment, UploadResult

logger = structlog.get_logger(__name__)


class StorageClient:
    """Requests a write slot from the storage API and PUTs the file bytes to it."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self.http_client = http_client
        self.storage_url = settings.storage_url
        self.api_key = settings.storage_api_key
        self.timeout_seconds = settings.http_timeout_seconds
        self._missing = settings.missing("storage_url", "storage_api_key")

    async def _request(self, step: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            # Total deadline for the call, body included.
            async with asyncio.timeout(self.timeout_seconds):
                response = await self.http_client.request(method, url, **kwargs)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise IntegrationError(f"{step} timed out") from exc
        except httpx.HTTPError as exc:
            raise IntegrationError(f"{step} failed: {exc}") from exc
        if not response.is_success:
            raise IntegrationError(f"{step} failed ({response.status_code}): {response.text}")
        return response

    async def upload(self, attachment: FileAttachment) -> UploadResult:
        if self._missing:
            raise IntegrationError(f"Missing required configuration: {', '.join(self._missing)}")

        init = await self._request(
            "Storage init",
            "POST",
            self.storage_url,
            headers={"X-API-Key": self.api_key},
            json={"filename": attachment.filename, "contentType": attachment.content_type},
        )
        try:
            data = init.json().get("data") or {}
        except (ValueError, AttributeError):
            data = {}
        attachment_id = data.get("id") if isinstance(data, dict) else None
        upload_url = data.get("url") if isinstance(data, dict) else None
        if not attachment_id or not upload_url:
            raise IntegrationError("Storage response missing attachment id or upload url")

        await self._request(
            "Upload",
            "PUT",
            upload_url,
            headers={"Content-Type": attachment.content_type},
            content=attachment.data,
        )
        logger.info(
            "attachment_uploaded",
            attachment_id=attachment_id,
            filename=attachment.filename,
            size=len(attachment.data),
        )
        return UploadResult(attachment_id=str(attachment_id))

    async def upload_all(self, attachments: list[FileAttachment]) -> list[UploadResult]:
        """Upload every attachment concurrently; results keep the input order.

        All uploads run to completion before the first failure (in input order)
        is raised.
        """
        outcomes = await asyncio.gather(
            *(self.upload(attachment) for attachment in attachments),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)


async def upload_attachments(
    http_client: httpx.AsyncClient,
    settings: Settings,
    attachments: list[FileAttachment],
) -> Result[list[UploadResult]]:
    try:
        results = await StorageClient(http_client, settings).upload_all(attachments)
    except IntegrationError as exc:
        logger.warning("attachment_upload_failed", error=str(exc), count=len(attachments))
        return server_error(str(exc))
    return Success(results)
