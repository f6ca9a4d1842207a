from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import httpx
import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .config import Settings, load_settings
from .intake import run_submission
from .logging import RequestIdMiddleware, setup_logging
from .results import Failure, SubmitError, method_not_allowed, server_error
from .static_files import StaticFileResponder

logger = structlog.get_logger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _json_response(status_code: int, payload: dict[str, Any], headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        payload,
        status_code=status_code,
        headers=headers,
        media_type="application/json; charset=utf-8",
    )


def _error_response(error: SubmitError, headers: dict[str, str] | None = None) -> JSONResponse:
    return _json_response(error.status_code, error.to_dict(), headers=headers)


def build_http_client(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        transport=transport,
    )


def create_web_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    if settings is None:
        project_root = Path(__file__).resolve().parents[1]
        load_dotenv(project_root / ".env", override=False)
        settings = load_settings()
        setup_logging(settings.log_level)

    owns_client = http_client is None
    if http_client is None:
        http_client = build_http_client(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if owns_client:
            await http_client.aclose()

    app = FastAPI(title="Claim Intake", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(RequestIdMiddleware)
    app.state.settings = settings
    app.state.http_client = http_client
    static = StaticFileResponder(settings.public_dir)

    @app.get("/api/health")
    async def health() -> JSONResponse:
        return _json_response(200, {"ok": True})

    @app.api_route("/api/submit", methods=ALL_METHODS)
    async def submit(request: Request) -> JSONResponse:
        if request.method != "POST":
            return _error_response(method_not_allowed().error, headers={"Allow": "POST"})

        try:
            result = await run_submission(request, settings, http_client)
        except Exception as exc:
            logger.exception("claim_submission_crashed")
            result = server_error(str(exc))

        if isinstance(result, Failure):
            logger.info("claim_submission_rejected", status=result.error.status_code, error=result.error.error)
            return _error_response(result.error)
        logger.info("claim_submission_accepted")
        return _json_response(200, result.value)

    @app.api_route("/{resource_path:path}", methods=ALL_METHODS)
    async def static_file(request: Request) -> Response:
        return await static.respond(request.scope["path"])

    return app
