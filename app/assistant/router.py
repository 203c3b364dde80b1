from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from app.assistant.schemas import (
    AuditRequest,
    ChatOut,
    ChatRequest,
    ErrorOut,
    RecommendOut,
    RecommendRequest,
)
from app.assistant.service import AssistantService
from app.core.llm.deps import get_siliconflow_client
from app.core.llm.siliconflow_client import SiliconFlowClient
from app.domain.exceptions import RelayError

router = APIRouter(prefix="/api", tags=["assistant"])
logger = logging.getLogger("app.assistant")

T = TypeVar("T")

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    500: {"model": ErrorOut, "description": "Upstream, configuration or reply-parsing failure."},
}


def _service(request: Request, client: SiliconFlowClient) -> AssistantService:
    request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")
    return AssistantService(llm_client=client, request_id=request_id)


async def _relay(operation: str, run: Callable[[], Awaitable[T]]) -> T:
    """Run one relay operation; anything unexpected becomes a plain 500 RelayError."""

    try:
        return await run()
    except RelayError:
        raise
    except Exception as exc:  # noqa: BLE001 - every failure must end as a JSON error body
        logger.exception("Unexpected error in %s", operation, extra={"operation": operation})
        raise RelayError(str(exc) or type(exc).__name__) from exc


@router.post(
    "/chat",
    response_model=ChatOut,
    summary="Freeform chat assistance",
    responses={400: {"model": ErrorOut, "description": "Empty message."}, **_ERROR_RESPONSES},
)
async def chat(
    request: Request,
    body: ChatRequest = Body(default_factory=ChatRequest),
    client: SiliconFlowClient = Depends(get_siliconflow_client),
) -> ChatOut:
    svc = _service(request, client)
    return await _relay("chat", lambda: svc.chat(body))


@router.post(
    "/recommend",
    response_model=RecommendOut,
    summary="Recommend parameter values",
    description="Values are restricted to the caller-supplied `keys` whitelist.",
    responses=_ERROR_RESPONSES,
)
async def recommend(
    request: Request,
    body: RecommendRequest = Body(default_factory=RecommendRequest),
    client: SiliconFlowClient = Depends(get_siliconflow_client),
) -> RecommendOut:
    svc = _service(request, client)
    return await _relay("recommend", lambda: svc.recommend(body))


@router.post(
    "/audit",
    summary="Audit parameter values",
    description="Returns the model's JSON verdict verbatim (`ok`, `issues`, `suggestions`).",
    responses=_ERROR_RESPONSES,
)
async def audit(
    request: Request,
    body: AuditRequest = Body(default_factory=AuditRequest),
    client: SiliconFlowClient = Depends(get_siliconflow_client),
) -> JSONResponse:
    svc = _service(request, client)
    verdict = await _relay("audit", lambda: svc.audit(body))
    return JSONResponse(content=verdict)
