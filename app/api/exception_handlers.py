from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain.exceptions import RelayError

logger = logging.getLogger("app.errors")


def _log_failure(request: Request, *, status_code: int, error: str) -> None:
    # Do not log request bodies or raw model replies.
    request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")
    logger.info(
        "Request failed",
        extra={
            "request_id": request_id,
            "http_method": request.method,
            "request_path": request.url.path,  # no query string
            "status_code": status_code,
            "error": error,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError) -> JSONResponse:
        _log_failure(request, status_code=exc.status_code, error=type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        _log_failure(request, status_code=400, error="request_validation")
        return JSONResponse(status_code=400, content={"error": "invalid request body"})
