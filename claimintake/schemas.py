from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

DEFAULT_FILENAME = "insurance-claim-photo"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
SUBJECT_PREFIX = "Car Insurance Claim - "


@dataclass(slots=True)
class TextField:
    name: str
    value: str


@dataclass(slots=True)
class FileField:
    name: str
    filename: str
    content_type: str
    data: bytes

    @property
    def is_placeholder(self) -> bool:
        # Browsers post an empty, unnamed part for a file input with nothing selected.
        return not self.filename and not self.data


FormField = Union[TextField, FileField]


@dataclass(slots=True)
class FileAttachment:
    filename: str
    content_type: str
    data: bytes

    @classmethod
    def from_field(cls, part: FileField) -> FileAttachment:
        return cls(
            filename=part.filename or DEFAULT_FILENAME,
            content_type=part.content_type or DEFAULT_CONTENT_TYPE,
            data=part.data,
        )


@dataclass(slots=True)
class ClaimSubmission:
    full_name: str
    email: str
    policy_certificate_ref: str | None = None
    policy_file: FileAttachment | None = None
    files: list[FileAttachment] = field(default_factory=list)


@dataclass(slots=True)
class UploadResult:
    attachment_id: str


@dataclass(slots=True)
class WebhookPayload:
    trigger_id: str
    task_type: str
    customer_email: str
    customer_name: str
    subject: str | None = None

    @classmethod
    def for_claim(
        cls,
        submission: ClaimSubmission,
        trigger_id: str,
        task_type: str,
        with_subject: bool,
    ) -> WebhookPayload:
        subject = f"{SUBJECT_PREFIX}{submission.full_name}".strip() if with_subject else None
        return cls(
            trigger_id=trigger_id,
            task_type=task_type,
            customer_email=submission.email,
            customer_name=submission.full_name,
            subject=subject,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"customer_email": self.customer_email}
        if self.subject is not None:
            payload["subject"] = self.subject
        payload["customer_name"] = self.customer_name
        return {
            "trigger_id": self.trigger_id,
            "task_type": self.task_type,
            "payload": payload,
        }
