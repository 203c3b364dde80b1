from __future__ import annotations

from fastapi import Request

from app.core.llm.siliconflow_client import SiliconFlowClient, SiliconFlowConfig
from app.core.settings import Settings


def build_siliconflow_config(settings: Settings) -> SiliconFlowConfig:
    """Snapshot the LLM configuration once, at application startup."""

    return SiliconFlowConfig(
        api_key=settings.siliconflow_api_key,
        base_url=settings.siliconflow_base_url,
        chat_model=settings.siliconflow_chat_model,
        recommend_model=settings.siliconflow_recommend_model,
        audit_model=settings.siliconflow_audit_model,
        timeout_seconds=float(settings.siliconflow_timeout_seconds),
    )


def get_siliconflow_client(request: Request) -> SiliconFlowClient:
    """
    Dependency provider for SiliconFlowClient.

    The client is returned even when no API key is configured: `call()` then raises
    ConfigurationError, which the edge maps to a 500 with a clear message.
    """

    config: SiliconFlowConfig = request.app.state.siliconflow_config
    return SiliconFlowClient(config=config)
