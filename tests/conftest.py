from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from claimintake.config import Settings

STORAGE_URL = "https://api.test/api/v1/storage"
WEBHOOK_URL = "https://api.test/api/v1/tasks/webhook/hook-1"
UPLOAD_HOST = "uploads.test"


class FakeUpstream:
    """Storage API, upload sink and webhook endpoint behind one mock transport."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.storage_status = 200
        self.storage_body: Any = None
        self.upload_status = 200
        self.webhook_status = 200
        self.webhook_body: Any = {"task_id": "task-42", "status": "queued"}
        self.upload_delays: dict[str, float] = {}
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.method == "POST" and url == STORAGE_URL:
            body = json.loads(request.content)
            self.calls.append(("init", body["filename"]))
            if self.storage_status != 200:
                return httpx.Response(self.storage_status, text="storage unavailable")
            if self.storage_body is not None:
                return httpx.Response(200, json=self.storage_body)
            return httpx.Response(
                200,
                json={
                    "data": {
                        "id": f"att-{body['filename']}",
                        "url": f"https://{UPLOAD_HOST}/{body['filename']}",
                    }
                },
            )

        if request.method == "PUT" and request.url.host == UPLOAD_HOST:
            name = request.url.path.lstrip("/")
            await asyncio.sleep(self.upload_delays.get(name, 0))
            self.calls.append(("put", name))
            if self.upload_status != 200:
                return httpx.Response(self.upload_status, text="bucket rejected")
            return httpx.Response(200)

        if request.method == "POST" and url == WEBHOOK_URL:
            self.calls.append(("webhook", json.loads(request.content)))
            if self.webhook_status != 200:
                return httpx.Response(self.webhook_status, text="webhook rejected")
            return httpx.Response(200, json=self.webhook_body)

        return httpx.Response(404, text=f"unexpected {request.method} {url}")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<h1>Car Insurance Claim</h1>", encoding="utf-8")
    (root / "app.js").write_text("console.log('claim');", encoding="utf-8")
    (root / "logo.bin").write_bytes(b"\x00\x01")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


@pytest.fixture
def make_settings(public_dir: Path) -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "base_url": "https://wonderful.app.test",
            "api_base_url": "https://api.test",
            "storage_url": STORAGE_URL,
            "storage_api_key": "storage-key",
            "webhook_url": WEBHOOK_URL,
            "webhook_secret": "hook-secret",
            "task_type": "process_claim",
            "trigger_id": "trigger-1",
            "host": "127.0.0.1",
            "port": 5173,
            "public_dir": public_dir,
            "submit_profile": "policy_evidence",
            "http_timeout_seconds": 5.0,
            "log_level": "INFO",
        }
        values.update(overrides)
        return Settings(**values)

    return _make
