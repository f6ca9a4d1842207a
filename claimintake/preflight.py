from __future__ import annotations

import socket
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from dotenv import load_dotenv

from .config import PLACEHOLDER_SECRET, WEBHOOK_BASE_PATH, Settings, load_settings
from .static_files import INDEX_DOCUMENT


def _check_dns(host: str) -> tuple[bool, str]:
    try:
        socket.gethostbyname(host)
        return True, "resolved"
    except Exception as exc:  # pragma: no cover
        return False, str(exc)


def run_preflight(
    project_root: str | Path | None = None,
    settings: Settings | None = None,
    check_dns: bool = True,
) -> dict[str, Any]:
    if settings is None:
        root = Path(project_root) if project_root else Path(__file__).resolve().parents[1]
        load_dotenv(root / ".env", override=False)
        settings = load_settings()

    checks: list[dict[str, Any]] = []

    def add(name: str, ok: bool, severity: str, detail: str) -> None:
        checks.append({"name": name, "ok": ok, "severity": severity, "detail": detail})

    public_dir = settings.public_dir
    add("public_dir", public_dir.is_dir(), "fail", str(public_dir))
    add("index_document", (public_dir / INDEX_DOCUMENT).is_file(), "warn", INDEX_DOCUMENT)

    if settings.submit_profile != "json":
        for name in ("storage_url", "storage_api_key"):
            add(name, bool(getattr(settings, name)), "fail", f"{name.upper()} is required for file uploads")
    for name in ("webhook_url", "webhook_secret"):
        add(name, bool(getattr(settings, name)), "fail", f"{name.upper()} is required")
    if settings.webhook_url and settings.webhook_url.rstrip("/").endswith(WEBHOOK_BASE_PATH):
        add("webhook_url_id", False, "warn", "WEBHOOK_URL has no webhook id; set it to the full webhook endpoint")

    for name in ("storage_api_key", "webhook_secret"):
        if getattr(settings, name) == PLACEHOLDER_SECRET:
            add(f"{name}_placeholder", False, "warn", f"{name.upper()} still uses the placeholder value")

    if check_dns:
        hosts = {
            urlparse(url).hostname
            for url in (settings.storage_url, settings.webhook_url)
            if url
        }
        for host in sorted(h for h in hosts if h):
            ok, detail = _check_dns(host)
            add(f"dns:{host}", ok, "warn", detail)

    failed = [c for c in checks if not c["ok"] and c["severity"] == "fail"]
    warnings = [c for c in checks if not c["ok"] and c["severity"] == "warn"]

    status = "ok"
    if failed:
        status = "fail"
    elif warnings:
        status = "warn"

    return {
        "status": status,
        "settings": {
            "submit_profile": settings.submit_profile,
            "storage_url": settings.storage_url,
            "webhook_url": settings.webhook_url,
            "task_type": settings.task_type,
            "public_dir": str(settings.public_dir),
            "http_timeout_seconds": settings.http_timeout_seconds,
        },
        "summary": {
            "passed": len([c for c in checks if c["ok"]]),
            "failed": len(failed),
            "warnings": len(warnings),
        },
        "checks": checks,
    }
