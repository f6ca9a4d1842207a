from __future__ import annotations

from pathlib import Path

from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response

CONTENT_TYPES: dict[str, str] = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"
INDEX_DOCUMENT = "index.html"


class PathOutsideRoot(Exception):
    pass


class StaticFileResponder:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, url_path: str) -> Path:
        """Map a decoded URL path to a file path under the public root.

        Raises PathOutsideRoot when the canonical path escapes the root.
        """
        relative = INDEX_DOCUMENT if url_path in ("", "/") else url_path.lstrip("/\\")
        resolved = (self.root / relative).resolve()
        if not resolved.is_relative_to(self.root):
            raise PathOutsideRoot(url_path)
        return resolved

    async def respond(self, url_path: str) -> Response:
        try:
            path = self.resolve(url_path)
        except PathOutsideRoot:
            return PlainTextResponse("Forbidden", status_code=403)
        except (OSError, ValueError):
            return PlainTextResponse("Not Found", status_code=404)

        try:
            content = await run_in_threadpool(path.read_bytes)
        except (OSError, ValueError):
            return PlainTextResponse("Not Found", status_code=404)

        content_type = CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)
        return Response(content=content, headers={"Content-Type": content_type})
