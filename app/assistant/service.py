from __future__ import annotations

import logging
import time
from typing import Any, Callable, Protocol

from app.assistant.extraction import (
    extract_chat_reply,
    extract_json,
    filter_recommendation,
    reply_text,
)
from app.assistant.prompts import (
    Prompt,
    build_audit_prompt,
    build_chat_prompt,
    build_recommend_prompt,
)
from app.assistant.schemas import (
    AuditRequest,
    ChatOut,
    ChatRequest,
    RecommendOut,
    RecommendRequest,
)
from app.core.llm.siliconflow_client import SiliconFlowConfig
from app.core.metrics import llm_request_duration_seconds, llm_requests_total
from app.domain.exceptions import InvalidRequestError, RelayError

logger = logging.getLogger("app.assistant")


def _structured_reply(data: Any) -> Any:
    return extract_json(reply_text(data))


class UpstreamClient(Protocol):
    @property
    def config(self) -> SiliconFlowConfig: ...

    async def call(self, payload: dict[str, Any]) -> Any: ...


class AssistantService:
    """
    Relay the three UI operations to the upstream model.

    Each method walks Validated -> UpstreamCalled -> Extracted and either returns the
    full response body or raises; nothing is ever returned half-built.
    """

    def __init__(self, *, llm_client: UpstreamClient, request_id: str | None = None):
        self._llm = llm_client
        self._request_id = request_id

    async def chat(self, body: ChatRequest) -> ChatOut:
        if not body.message:
            raise InvalidRequestError("message is required")

        prompt = build_chat_prompt(message=body.message, params=body.params, history=body.history)
        data = await self._call("chat", prompt, model=self._llm.config.chat_model)
        return ChatOut(reply=self._extract("chat", data, extract_chat_reply))

    async def recommend(self, body: RecommendRequest) -> RecommendOut:
        prompt = build_recommend_prompt(
            user_intent=body.user_intent, params=body.params, keys=body.keys
        )
        data = await self._call("recommend", prompt, model=self._llm.config.recommend_model)
        parsed = self._extract("recommend", data, _structured_reply)
        result, reason = filter_recommendation(parsed, keys=body.keys)
        return RecommendOut(result=result, reason=reason)

    async def audit(self, body: AuditRequest) -> Any:
        prompt = build_audit_prompt(params=body.params, labels=body.labels)
        data = await self._call("audit", prompt, model=self._llm.config.audit_model)
        return self._extract("audit", data, _structured_reply)

    async def _call(self, operation: str, prompt: Prompt, *, model: str) -> Any:
        started = time.perf_counter()
        try:
            data = await self._llm.call(prompt.to_payload(model=model))
        except RelayError as exc:
            self._record(operation, success=False, error_type=type(exc).__name__)
            raise
        finally:
            llm_request_duration_seconds.labels(operation=operation).observe(
                time.perf_counter() - started
            )
        return data

    def _extract(self, operation: str, data: Any, extractor: Callable[[Any], Any]) -> Any:
        try:
            extracted = extractor(data)
        except RelayError as exc:
            self._record(operation, success=False, error_type=type(exc).__name__)
            raise
        self._record(operation, success=True)
        return extracted

    def _record(self, operation: str, *, success: bool, error_type: str | None = None) -> None:
        # Never log prompts or model output; metadata only.
        llm_requests_total.labels(
            operation=operation, outcome="success" if success else "error"
        ).inc()
        logger.info(
            "LLM operation %s",
            "succeeded" if success else "failed",
            extra={
                "request_id": self._request_id,
                "operation": operation,
                "success": success,
                "error_type": error_type,
            },
        )
