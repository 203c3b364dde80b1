from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "auto-gen-relay"
    app_env: str = Field(
        default="production",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
        description="Runtime environment: development|production.",
    )
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("PORT", "port"),
        description="Port the HTTP server listens on.",
    )
    max_request_body_mb: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices("MAX_REQUEST_BODY_MB", "max_request_body_mb"),
        description="Maximum accepted JSON request body size (MB).",
    )

    # LLM integration (SiliconFlow, OpenAI-compatible chat completions)
    siliconflow_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SILICONFLOW_API_KEY", "siliconflow_api_key"),
        description="SiliconFlow API key (required for /api/chat, /api/recommend, /api/audit).",
    )
    siliconflow_base_url: str = Field(
        default="https://api.siliconflow.cn/v1",
        validation_alias=AliasChoices("SILICONFLOW_BASE_URL", "siliconflow_base_url"),
        description="Base URL for the SiliconFlow API (override for proxies/emulators).",
    )
    siliconflow_chat_model: str = Field(
        default="deepseek-ai/DeepSeek-V3",
        validation_alias=AliasChoices("SILICONFLOW_CHAT_MODEL", "siliconflow_chat_model"),
        description="Model used for freeform chat assistance.",
    )
    siliconflow_recommend_model: str = Field(
        default="deepseek-ai/DeepSeek-V3",
        validation_alias=AliasChoices(
            "SILICONFLOW_RECOMMEND_MODEL", "siliconflow_recommend_model"
        ),
        description="Model used for parameter recommendation.",
    )
    siliconflow_audit_model: str = Field(
        default="deepseek-ai/DeepSeek-V2.5",
        validation_alias=AliasChoices("SILICONFLOW_AUDIT_MODEL", "siliconflow_audit_model"),
        description="Model used for parameter auditing.",
    )
    siliconflow_timeout_seconds: float = Field(
        default=180.0,
        ge=1.0,
        validation_alias=AliasChoices(
            "SILICONFLOW_TIMEOUT_SECONDS", "siliconflow_timeout_seconds"
        ),
        description="Total deadline for a single upstream request (seconds).",
    )

    @property
    def max_request_body_bytes(self) -> int:
        return int(self.max_request_body_mb) * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return str(self.app_env).strip().lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
