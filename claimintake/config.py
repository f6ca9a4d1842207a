from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BASE_URL = "https://wonderful.app.demo.wonderful.ai"
DEFAULT_TRIGGER_ID = "4fd88805-7cde-4a7a-9d99-5347e5fb308e"
PLACEHOLDER_SECRET = "change-me"
# Base path only; a deployment appends its webhook id.
WEBHOOK_BASE_PATH = "/api/v1/tasks/webhook"

SUBMIT_PROFILES = ("json", "evidence", "policy_evidence")


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        value = default
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    value = _env_str(name)
    return int(value) if value is not None else default


def _env_float(name: str, default: float) -> float:
    value = _env_str(name)
    return float(value) if value is not None else default


def _default_public_dir() -> Path:
    return Path(__file__).resolve().parent / "web"


@dataclass(slots=True, frozen=True)
class Settings:
    base_url: str
    api_base_url: str

    storage_url: str | None
    storage_api_key: str | None

    webhook_url: str | None
    webhook_secret: str | None
    task_type: str
    trigger_id: str

    host: str
    port: int
    public_dir: Path
    submit_profile: str

    http_timeout_seconds: float
    log_level: str

    def missing(self, *names: str) -> list[str]:
        """Environment names of the given settings that are unset."""
        return [name.upper() for name in names if not getattr(self, name)]


def load_settings() -> Settings:
    base_url = _env_str("BASE_URL", DEFAULT_BASE_URL) or DEFAULT_BASE_URL
    api_base_url = _env_str("API_BASE_URL") or base_url.replace("wonderful.app", "api")

    submit_profile = (_env_str("SUBMIT_PROFILE", "policy_evidence") or "").lower()
    if submit_profile not in SUBMIT_PROFILES:
        raise ValueError(
            f"Unsupported SUBMIT_PROFILE: {submit_profile!r} (expected one of {', '.join(SUBMIT_PROFILES)})"
        )

    public_dir = _env_str("PUBLIC_DIR")
    return Settings(
        base_url=base_url,
        api_base_url=api_base_url,
        storage_url=_env_str("STORAGE_URL", f"{api_base_url}/api/v1/storage"),
        storage_api_key=_env_str("STORAGE_API_KEY", PLACEHOLDER_SECRET),
        webhook_url=_env_str("WEBHOOK_URL", f"{api_base_url}{WEBHOOK_BASE_PATH}"),
        webhook_secret=_env_str("WEBHOOK_SECRET", PLACEHOLDER_SECRET),
        task_type=_env_str("TASK_TYPE") or "process_claim",
        trigger_id=_env_str("TRIGGER_ID") or DEFAULT_TRIGGER_ID,
        host=_env_str("HOST") or "127.0.0.1",
        port=_env_int("PORT", 5173),
        public_dir=Path(public_dir) if public_dir else _default_public_dir(),
        submit_profile=submit_profile,
        http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", 30.0),
        log_level=(_env_str("LOG_LEVEL") or "INFO").upper(),
    )
