"""Stage results and the JSON error envelope returned by the submit route."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

MISSING_FIELDS = "missing_fields"
MISSING_POLICY = "missing_policy"
MISSING_EVIDENCE = "missing_evidence"
MISSING_FILE = "missing_file"
METHOD_NOT_ALLOWED = "method_not_allowed"
SERVER_ERROR = "server_error"


class IntegrationError(Exception):
    """An upstream call or required integration setting failed."""


@dataclass(slots=True, frozen=True)
class SubmitError:
    status_code: int
    error: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.error, "message": self.message}


@dataclass(slots=True, frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(slots=True, frozen=True)
class Failure:
    error: SubmitError


Result = Union[Success[T], Failure]


def validation_error(code: str, message: str) -> Failure:
    return Failure(SubmitError(status_code=400, error=code, message=message))


def server_error(message: str) -> Failure:
    return Failure(SubmitError(status_code=500, error=SERVER_ERROR, message=message or "Unknown error"))


def method_not_allowed() -> Failure:
    return Failure(
        SubmitError(status_code=405, error=METHOD_NOT_ALLOWED, message="Only POST is allowed.")
    )
