"""Test helpers for the assistant slice."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi.testclient import TestClient

from app.core.llm.deps import get_siliconflow_client
from app.core.llm.siliconflow_client import SiliconFlowConfig
from app.main import create_app

TEST_CONFIG = SiliconFlowConfig(
    api_key="test-key",
    base_url="https://llm.invalid/v1",
    chat_model="chat-model",
    recommend_model="recommend-model",
    audit_model="audit-model",
)


def completion(content: Any) -> dict[str, Any]:
    """An OpenAI-style chat-completion body carrying `content`."""
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeSiliconFlowClient:
    """Records payloads and answers with a canned body (or raises `error`)."""

    def __init__(
        self,
        content: Any = None,
        *,
        data: Any = None,
        error: Exception | None = None,
    ):
        self._data = data if data is not None else completion(content)
        self._error = error
        self.payloads: list[dict[str, Any]] = []

    @property
    def config(self) -> SiliconFlowConfig:
        return TEST_CONFIG

    async def call(self, payload: dict[str, Any]) -> Any:
        self.payloads.append(payload)
        if self._error is not None:
            raise self._error
        return self._data


@contextmanager
def relay_client(fake: FakeSiliconFlowClient) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_siliconflow_client] = lambda: fake
    with TestClient(app) as c:
        yield c
