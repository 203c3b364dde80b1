from __future__ import annotations

import pytest

from app.assistant.prompts import (
    build_audit_prompt,
    build_chat_prompt,
    build_recommend_prompt,
    normalize_role,
)
from app.assistant.schemas import HistoryMessage


@pytest.mark.parametrize(
    ("role", "expected"),
    [("ai", "assistant"), ("assistant", "assistant"), ("AI", "assistant"), ("user", "user"),
     ("system", "user"), ("", "user")],
)
def test_normalize_role(role: str, expected: str) -> None:
    assert normalize_role(role) == expected


def test_chat_prompt_dumps_params_after_instructions() -> None:
    prompt = build_chat_prompt(message="hi", params={"续航": 500, "seats": 5}, history=[])

    lines = prompt.system_prompt.split("\n")
    assert lines[-2] == "当前参数:"
    assert lines[-1] == '{"续航":500,"seats":5}'
    assert prompt.messages == [
        {"role": "system", "content": prompt.system_prompt},
        {"role": "user", "content": "hi"},
    ]


def test_chat_prompt_keeps_history_order() -> None:
    history = [
        HistoryMessage(role="user", content="a"),
        HistoryMessage(role="ai", content="b"),
        HistoryMessage(role="user", content="c"),
    ]
    prompt = build_chat_prompt(message="d", params={}, history=history)

    assert [m["content"] for m in prompt.messages[1:]] == ["a", "b", "c", "d"]
    assert [m["role"] for m in prompt.messages[1:]] == ["user", "assistant", "user", "user"]


def test_recommend_prompt_lists_keys() -> None:
    prompt = build_recommend_prompt(user_intent="省电", params={"range": 400}, keys=["range", "电池"])

    assert prompt.system_prompt.endswith('键列表:["range","电池"]')
    assert '{"result":{...},"reason":"..."}' in prompt.system_prompt
    assert len(prompt.messages) == 2
    assert prompt.messages[1]["content"] == '{"userIntent":"省电","params":{"range":400}}'


def test_audit_prompt_shape() -> None:
    prompt = build_audit_prompt(params={}, labels={})

    assert '"ok":true/false' in prompt.system_prompt
    assert prompt.messages[1] == {"role": "user", "content": '{"params":{},"labels":{}}'}


def test_sampling_is_fixed_per_operation() -> None:
    chat = build_chat_prompt(message="x", params={}, history=[])
    recommend = build_recommend_prompt(user_intent="", params={}, keys=[])
    audit = build_audit_prompt(params={}, labels={})

    assert (chat.temperature, chat.max_tokens) == (0.6, 1000)
    assert (recommend.temperature, recommend.max_tokens) == (0.2, 800)
    assert (audit.temperature, audit.max_tokens) == (0.3, 600)


def test_to_payload_matches_upstream_contract() -> None:
    prompt = build_audit_prompt(params={"a": 1}, labels={})
    payload = prompt.to_payload(model="m")

    assert set(payload) == {"model", "messages", "temperature", "max_tokens"}
    assert payload["model"] == "m"
    assert payload["messages"] is prompt.messages
