from __future__ import annotations

import json
from typing import Any

from starlette.datastructures import UploadFile
from starlette.requests import Request

from .results import (
    MISSING_EVIDENCE,
    MISSING_FIELDS,
    MISSING_FILE,
    MISSING_POLICY,
    Result,
    Success,
    server_error,
    validation_error,
)
from .schemas import ClaimSubmission, FileAttachment, FileField, FormField, TextField

MISSING_FIELDS_MESSAGE = "Please fill in all required fields."
MISSING_POLICY_MESSAGE = "Please attach your policy certificate."
MISSING_EVIDENCE_MESSAGE = "Please attach at least one evidence photo."

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_form_fields(request: Request) -> Result[list[FormField]]:
    """Parse a form body into tagged text/file parts, in body order."""
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type not in FORM_CONTENT_TYPES:
        return server_error(f"Unsupported content type: {media_type or 'missing'}")

    form = await request.form()
    fields: list[FormField] = []
    try:
        for name, value in form.multi_items():
            if isinstance(value, UploadFile):
                fields.append(
                    FileField(
                        name=name,
                        filename=value.filename or "",
                        content_type=value.content_type or "",
                        data=await value.read(),
                    )
                )
            else:
                fields.append(TextField(name=name, value=value))
    finally:
        await form.close()
    return Success(fields)


def _text(fields: list[FormField], name: str) -> str:
    for part in fields:
        if part.name == name and isinstance(part, TextField):
            return part.value.strip()
    return ""


def _files(fields: list[FormField], name: str) -> list[FileAttachment]:
    return [
        FileAttachment.from_field(part)
        for part in fields
        if part.name == name and isinstance(part, FileField) and not part.is_placeholder
    ]


def _json_text(value: Any) -> str:
    # Falsy values read as empty, everything else as its display text.
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if value is True:
        return "true"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)


def decode_json_submission(body: bytes) -> Result[ClaimSubmission]:
    try:
        data: Any = json.loads(body or b"")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return server_error(f"Invalid JSON body: {exc}")
    if data is None:
        return server_error("Invalid JSON body: null")

    fields = data if isinstance(data, dict) else {}
    full_name = _json_text(fields.get("full_name")).strip()
    email = _json_text(fields.get("email")).strip()
    if not full_name or not email:
        return validation_error(MISSING_FIELDS, MISSING_FIELDS_MESSAGE)
    return Success(ClaimSubmission(full_name=full_name, email=email))


def decode_evidence_submission(fields: list[FormField]) -> Result[ClaimSubmission]:
    full_name = _text(fields, "full_name")
    email = _text(fields, "email")

    policy_ref = _text(fields, "policy_certificate")
    if not policy_ref:
        policy_files = _files(fields, "policy_certificate")
        policy_ref = policy_files[0].filename if policy_files else ""

    if not full_name or not email or not policy_ref:
        return validation_error(MISSING_FIELDS, MISSING_FIELDS_MESSAGE)

    files = _files(fields, "claim_file")
    if not files:
        return validation_error(MISSING_FILE, MISSING_EVIDENCE_MESSAGE)

    return Success(
        ClaimSubmission(
            full_name=full_name,
            email=email,
            policy_certificate_ref=policy_ref,
            files=files,
        )
    )


def decode_policy_evidence_submission(fields: list[FormField]) -> Result[ClaimSubmission]:
    full_name = _text(fields, "full_name")
    email = _text(fields, "email")
    if not full_name or not email:
        return validation_error(MISSING_FIELDS, MISSING_FIELDS_MESSAGE)

    policy_files = _files(fields, "policy_certificate")
    if not policy_files:
        return validation_error(MISSING_POLICY, MISSING_POLICY_MESSAGE)

    files = _files(fields, "claim_file")
    if not files:
        return validation_error(MISSING_EVIDENCE, MISSING_EVIDENCE_MESSAGE)

    policy_file = policy_files[0]
    return Success(
        ClaimSubmission(
            full_name=full_name,
            email=email,
            policy_certificate_ref=policy_file.filename,
            policy_file=policy_file,
            files=files,
        )
    )
