from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from app.domain.exceptions import RelayError


class SiliconFlowError(RelayError):
    """Base error for upstream client failures (mapped to 500 at the edge)."""


class ConfigurationError(SiliconFlowError):
    """Raised when no API key is configured. The network is never touched."""


class UpstreamError(SiliconFlowError):
    """Raised when the provider answers with a non-2xx status or the transport fails."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body


class UpstreamTimeoutError(SiliconFlowError):
    """Raised when no complete response arrives within the configured deadline."""


class UpstreamParseError(SiliconFlowError):
    """Raised when the provider's response body is not valid JSON."""


@dataclass(frozen=True)
class SiliconFlowConfig:
    api_key: str | None
    base_url: str
    chat_model: str
    recommend_model: str
    audit_model: str
    timeout_seconds: float = 180.0


class SiliconFlowClient:
    """
    Minimal chat-completions client for the SiliconFlow API.

    Design notes:
    - No logging in this module (prompts/outputs are user content).
    - `call()` sends the payload verbatim and returns the decoded body untouched;
      navigating to the reply text is the caller's concern.
    - A fresh `httpx.AsyncClient` per call, closed on every exit path (incl. timeout).
    """

    def __init__(
        self,
        *,
        config: SiliconFlowConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def config(self) -> SiliconFlowConfig:
        return self._config

    async def call(self, payload: dict[str, Any]) -> Any:
        if not self._config.api_key:
            raise ConfigurationError("Missing SILICONFLOW_API_KEY")

        try:
            # httpx timeouts are per network operation; wait_for enforces the total deadline.
            resp = await asyncio.wait_for(
                self._post(payload), timeout=self._config.timeout_seconds
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamTimeoutError("Request timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"SiliconFlow request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise UpstreamError(
                f"SiliconFlow API error {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamParseError("SiliconFlow response was not valid JSON") from exc

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self._config.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds, transport=self._transport
        ) as client:
            resp = await client.post(url, headers=headers, json=payload)
            return resp
