from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_text(value: Any) -> str:
    # Falsy scalars (null, false, 0, "") read as an absent value.
    if value is None or value is False or value == "":
        return ""
    if isinstance(value, (int, float)) and not value:
        return ""
    return str(value)


def _as_mapping(value: Any) -> dict[str, Any]:
    # The UI sends loosely-typed bodies; anything that isn't an object is treated as empty.
    return value if isinstance(value, dict) else {}


class HistoryMessage(BaseModel):
    role: str = "user"
    content: str = ""

    @field_validator("role", "content", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
    history: list[HistoryMessage] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> str:
        return _as_text(value).strip()

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, value: Any) -> dict[str, Any]:
        return _as_mapping(value)

    @field_validator("history", mode="before")
    @classmethod
    def _coerce_history(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        # Non-object entries carry no role/content; drop them.
        return [item for item in value if isinstance(item, dict)]


class RecommendRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_intent: str = Field(default="", alias="userIntent")
    params: dict[str, Any] = Field(default_factory=dict)
    keys: list[str] = Field(default_factory=list)

    @field_validator("user_intent", mode="before")
    @classmethod
    def _coerce_intent(cls, value: Any) -> str:
        return _as_text(value).strip()

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, value: Any) -> dict[str, Any]:
        return _as_mapping(value)

    @field_validator("keys", mode="before")
    @classmethod
    def _coerce_keys(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(k) for k in value if isinstance(k, (str, int, float))]


class AuditRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    params: dict[str, Any] = Field(default_factory=dict)
    labels: dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", "labels", mode="before")
    @classmethod
    def _coerce_mapping(cls, value: Any) -> dict[str, Any]:
        return _as_mapping(value)


class ChatOut(BaseModel):
    reply: str = Field(description="Trimmed assistant reply.")


class RecommendOut(BaseModel):
    result: dict[str, Any] = Field(
        description="Recommended values; keys are always a subset of the requested `keys`."
    )
    reason: str = Field(default="", description="Short explanation of the recommendation.")


class ErrorOut(BaseModel):
    error: str
    raw: str | None = Field(
        default=None, description="Raw model reply, present when it could not be parsed."
    )
