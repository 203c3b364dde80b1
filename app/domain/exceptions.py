from __future__ import annotations

from typing import Any


class RelayError(Exception):
    """Base error for anything that ends a relay request with a JSON error body."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_content(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidRequestError(RelayError):
    """Raised when the caller's request is missing a required field."""

    status_code = 400


class UnparsableReplyError(RelayError):
    """Raised when the model reply does not contain an extractable JSON value."""

    def __init__(self, message: str, *, raw: str):
        super().__init__(message)
        self.raw = raw

    def to_content(self) -> dict[str, Any]:
        return {"error": self.message, "raw": self.raw}
