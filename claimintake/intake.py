"""Submission pipelines, one per deployment profile.

Each pipeline composes decode -> upload -> dispatch and returns either the
success body for the JSON envelope or the first stage failure.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from starlette.requests import Request

from .config import Settings
from .forms import (
    decode_evidence_submission,
    decode_json_submission,
    decode_policy_evidence_submission,
    read_form_fields,
)
from .results import Failure, Result, Success
from .schemas import ClaimSubmission, WebhookPayload
from .storage import upload_attachments
from .webhook import dispatch_claim

logger = structlog.get_logger(__name__)


def _webhook_payload(settings: Settings, submission: ClaimSubmission, with_subject: bool) -> WebhookPayload:
    return WebhookPayload.for_claim(
        submission,
        trigger_id=settings.trigger_id,
        task_type=settings.task_type,
        with_subject=with_subject,
    )


async def submit_json_claim(
    request: Request, settings: Settings, http_client: httpx.AsyncClient
) -> Result[dict[str, Any]]:
    decoded = decode_json_submission(await request.body())
    if isinstance(decoded, Failure):
        return decoded
    submission = decoded.value

    dispatched = await dispatch_claim(http_client, settings, _webhook_payload(settings, submission, False))
    if isinstance(dispatched, Failure):
        return dispatched
    return Success({"ok": True, "webhook": dispatched.value})


async def submit_evidence_claim(
    request: Request, settings: Settings, http_client: httpx.AsyncClient
) -> Result[dict[str, Any]]:
    parsed = await read_form_fields(request)
    if isinstance(parsed, Failure):
        return parsed
    decoded = decode_evidence_submission(parsed.value)
    if isinstance(decoded, Failure):
        return decoded
    submission = decoded.value

    uploaded = await upload_attachments(http_client, settings, submission.files)
    if isinstance(uploaded, Failure):
        return uploaded
    attachment_ids = [result.attachment_id for result in uploaded.value]

    dispatched = await dispatch_claim(http_client, settings, _webhook_payload(settings, submission, True))
    if isinstance(dispatched, Failure):
        return dispatched
    return Success({"ok": True, "attachment_ids": attachment_ids, "webhook": dispatched.value})


async def submit_policy_evidence_claim(
    request: Request, settings: Settings, http_client: httpx.AsyncClient
) -> Result[dict[str, Any]]:
    parsed = await read_form_fields(request)
    if isinstance(parsed, Failure):
        return parsed
    decoded = decode_policy_evidence_submission(parsed.value)
    if isinstance(decoded, Failure):
        return decoded
    submission = decoded.value

    # Policy first, then evidence, in one concurrent batch.
    uploaded = await upload_attachments(http_client, settings, [submission.policy_file, *submission.files])
    if isinstance(uploaded, Failure):
        return uploaded
    attachment_ids = [result.attachment_id for result in uploaded.value]
    policy_attachment_id, *evidence_attachment_ids = attachment_ids

    dispatched = await dispatch_claim(http_client, settings, _webhook_payload(settings, submission, True))
    if isinstance(dispatched, Failure):
        return dispatched
    return Success(
        {
            "ok": True,
            "attachment_ids": attachment_ids,
            "policy_attachment_id": policy_attachment_id,
            "evidence_attachment_ids": evidence_attachment_ids,
            "webhook": dispatched.value,
        }
    )


PIPELINES = {
    "json": submit_json_claim,
    "evidence": submit_evidence_claim,
    "policy_evidence": submit_policy_evidence_claim,
}


async def run_submission(
    request: Request, settings: Settings, http_client: httpx.AsyncClient
) -> Result[dict[str, Any]]:
    pipeline = PIPELINES[settings.submit_profile]
    logger.info("claim_submission_received", profile=settings.submit_profile)
    return await pipeline(request, settings, http_client)
