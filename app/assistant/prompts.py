from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from app.assistant.schemas import HistoryMessage

_ASSISTANT_ROLES = {"ai", "assistant"}


@dataclass(frozen=True)
class Prompt:
    """System prompt plus the full message sequence (system message first)."""

    system_prompt: str
    messages: list[dict[str, str]]
    temperature: float
    max_tokens: int

    def to_payload(self, *, model: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": self.messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }


@dataclass(frozen=True)
class _Sampling:
    temperature: float
    max_tokens: int


# Lower temperature for the operations that must emit strict JSON.
CHAT_SAMPLING = _Sampling(temperature=0.6, max_tokens=1000)
RECOMMEND_SAMPLING = _Sampling(temperature=0.2, max_tokens=800)
AUDIT_SAMPLING = _Sampling(temperature=0.3, max_tokens=600)


def dump_json(value: Any) -> str:
    """Compact JSON, non-ASCII kept as-is (parameter labels are Chinese)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def normalize_role(role: str) -> str:
    """Map UI roles onto the two roles the upstream API accepts from history."""
    return "assistant" if role.strip().lower() in _ASSISTANT_ROLES else "user"


def _build(system_prompt: str, turns: list[dict[str, str]], sampling: _Sampling) -> Prompt:
    return Prompt(
        system_prompt=system_prompt,
        messages=[{"role": "system", "content": system_prompt}, *turns],
        temperature=sampling.temperature,
        max_tokens=sampling.max_tokens,
    )


def build_chat_prompt(
    *, message: str, params: dict[str, Any], history: list[HistoryMessage]
) -> Prompt:
    system_prompt = "\n".join(
        [
            "你是车辆参数化设计助手（面向非专业用户）。",
            "语气友好简洁，先给结论或建议，再用1-2句说明理由。",
            "需要用户操作时，给出明确的参数方向或范围。",
            "问题不清楚时，先问1个关键问题。",
            "结合当前参数做判断（单位以UI为准）。",
            "当前参数:",
            dump_json(params),
        ]
    )

    turns = [{"role": normalize_role(m.role), "content": m.content} for m in history]
    turns.append({"role": "user", "content": message})
    return _build(system_prompt, turns, CHAT_SAMPLING)


def build_recommend_prompt(
    *, user_intent: str, params: dict[str, Any], keys: list[str]
) -> Prompt:
    system_prompt = "\n".join(
        [
            "你是车辆参数推荐器。",
            "只输出严格JSON对象，不要任何解释或代码块。",
            '格式：{"result":{...},"reason":"..."}。',
            "result 的键必须来自给定键列表。",
            "reason 用1-2句中文说明推荐逻辑。",
            "值需合理，单位以前端为准。",
            f"键列表:{dump_json(keys)}",
        ]
    )

    user_content = dump_json({"userIntent": user_intent, "params": params})
    return _build(system_prompt, [{"role": "user", "content": user_content}], RECOMMEND_SAMPLING)


def build_audit_prompt(*, params: dict[str, Any], labels: dict[str, Any]) -> Prompt:
    system_prompt = "\n".join(
        [
            "你是车辆参数核验助手。",
            "只输出严格JSON对象，不要任何解释或代码块。",
            '格式：{"ok":true/false,"issues":[...],"suggestions":[...]}。',
            "issues 列出明显不合理之处，suggestions 给出简短改进建议。",
            "如无明显问题，ok 为 true，issues 为空。",
            "必须使用中文描述，并尽量引用参数中文名称。",
        ]
    )

    user_content = dump_json({"params": params, "labels": labels})
    return _build(system_prompt, [{"role": "user", "content": user_content}], AUDIT_SAMPLING)
