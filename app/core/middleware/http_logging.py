"""Per-request access logging.

- One record per request with metadata only: no bodies, no query strings, no headers.
  Chat messages and vehicle parameters never reach the logs.
- X-Request-ID is propagated when well-formed, generated otherwise, and echoed back.
"""

from __future__ import annotations

import logging
import re
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("app.http")

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def _request_id_for(request: Request) -> str:
    # Narrow charset/length to keep caller-supplied ids from injecting into log lines.
    candidate = request.headers.get(REQUEST_ID_HEADER)
    if candidate and _SAFE_REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if isinstance(path, str) and path:
        return path
    return "unmatched"


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    """Log request/response metadata and propagate a correlation id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id_for(request)
        started = time.perf_counter()
        # Downstream handlers read it back for their own operation logs.
        request.state.request_id = request_id

        def _meta(status_code: int) -> dict[str, object]:
            return {
                "request_id": request_id,
                "http_method": request.method,
                "request_path": _route_template(request),
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            }

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001 - logged with stack trace, then re-raised
            logger.exception("Unhandled exception while processing request", extra=_meta(500))
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("Request completed", extra=_meta(response.status_code))
        return response
