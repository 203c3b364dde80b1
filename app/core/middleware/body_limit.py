from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger("app.http")

_METHODS_WITH_BODY = {"POST", "PUT", "PATCH"}


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than `max_bytes` with 413 before they reach a handler."""

    def __init__(self, app: ASGIApp, *, max_bytes: int):
        super().__init__(app)
        self._max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method in _METHODS_WITH_BODY and await self._too_large(request):
            logger.info(
                "Request body too large",
                extra={
                    "request_id": getattr(request.state, "request_id", None),
                    "http_method": request.method,
                    "status_code": 413,
                },
            )
            return JSONResponse(status_code=413, content={"error": "request entity too large"})
        return await call_next(request)

    async def _too_large(self, request: Request) -> bool:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                return int(declared) > self._max_bytes
            except ValueError:
                return True
        # Chunked uploads have no declared length; Starlette replays the cached body downstream.
        body = await request.body()
        return len(body) > self._max_bytes
