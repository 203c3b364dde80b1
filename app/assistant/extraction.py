"""Turn raw chat-completion bodies into the shapes the UI expects.

JSON-in-text extraction is heuristic. The model is asked for a bare JSON object but
often wraps it in commentary or a ```json fence, so we:

1. take the greedy span from the first `{` to the last `}` and parse it
   (or the whole text when it has no such span);
2. if that fails, decode from each `{` in turn and keep the first well-formed object.

Step 2 only runs where step 1 would have failed, so replies that parsed before keep
parsing to the same value. Prose that itself contains braces around a valid object
can still defeat step 1 and fall through to step 2, which picks the *first* object.
"""

from __future__ import annotations

import json
import re
from typing import Any

from app.domain.exceptions import RelayError, UnparsableReplyError

CHAT_FALLBACK_REPLY = "未获取到有效回复"
UNPARSABLE_REPLY_MESSAGE = "AI reply could not be parsed as JSON"

_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")
_decoder = json.JSONDecoder()


class MalformedUpstreamResponseError(RelayError):
    """Raised when the upstream body has no `choices[0].message` to read."""


def reply_text(data: Any) -> str:
    """
    Navigate `choices[0].message.content` without trusting the body's shape.

    A missing path is an upstream contract violation. A present message with empty
    or null content is returned as "" so each operation decides what that means.
    """

    choices = data.get("choices") if isinstance(data, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise MalformedUpstreamResponseError(
            "Upstream response did not contain choices[0].message"
        )

    content = message.get("content")
    if not isinstance(content, str):
        return ""
    return content.strip()


def extract_chat_reply(data: Any) -> str:
    return reply_text(data) or CHAT_FALLBACK_REPLY


def _first_well_formed_object(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


def extract_json(text: str) -> Any:
    """Parse the JSON value embedded in a model reply or raise UnparsableReplyError."""

    match = _GREEDY_OBJECT.search(text)
    candidate = match.group(0) if match else text
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    recovered = _first_well_formed_object(text)
    if recovered is None:
        raise UnparsableReplyError(UNPARSABLE_REPLY_MESSAGE, raw=text)
    return recovered


def _is_set(value: Any) -> bool:
    """Null, false, 0 and "" count as unset; empty objects and lists do not."""
    if value is None or value is False or value == "":
        return False
    return not (isinstance(value, (int, float)) and not value)


def filter_recommendation(
    parsed: Any, *, keys: list[str]
) -> tuple[dict[str, Any], str]:
    """
    Split a parsed recommendation into (result, reason), keeping whitelisted keys only.

    Keys the model invents are dropped silently; output order follows `keys`.
    """

    candidate: Any = parsed
    reason: Any = ""
    if isinstance(parsed, dict) and _is_set(parsed.get("result")):
        # A result that is not an object yields no keys; the model's reason is kept.
        candidate = parsed["result"]
        reason = parsed.get("reason") or ""
    if not isinstance(candidate, dict):
        candidate = {}

    result = {key: candidate[key] for key in keys if key in candidate}
    return result, reason if isinstance(reason, str) else json.dumps(reason, ensure_ascii=False)
