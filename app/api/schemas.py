from __future__ import annotations

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Health check response."""

    ok: bool = Field(
        description="`true` means the API process is up and responding.",
        examples=[True],
    )
