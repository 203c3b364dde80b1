from __future__ import annotations

import pytest

from app.assistant.extraction import (
    CHAT_FALLBACK_REPLY,
    MalformedUpstreamResponseError,
    extract_chat_reply,
    extract_json,
    filter_recommendation,
    reply_text,
)
from app.domain.exceptions import UnparsableReplyError
from tests.assistant._helpers import completion


@pytest.mark.parametrize(
    "data",
    [None, {}, {"choices": []}, {"choices": [{}]}, {"choices": [{"message": "x"}]}, []],
)
def test_reply_text_rejects_bodies_without_a_message(data) -> None:
    with pytest.raises(MalformedUpstreamResponseError):
        reply_text(data)


def test_reply_text_trims_and_treats_null_content_as_empty() -> None:
    assert reply_text(completion("  hi \n")) == "hi"
    assert reply_text(completion(None)) == ""


def test_chat_reply_falls_back_when_empty() -> None:
    assert extract_chat_reply(completion("   ")) == CHAT_FALLBACK_REPLY
    assert extract_chat_reply(completion("好的")) == "好的"


def test_extract_json_from_fenced_block() -> None:
    text = '```json\n{"ok":true,"issues":[]}\n```'
    assert extract_json(text) == {"ok": True, "issues": []}


def test_extract_json_keeps_nested_objects_whole() -> None:
    text = 'Result: {"result": {"a": {"b": 1}}, "reason": "r"} done'
    assert extract_json(text) == {"result": {"a": {"b": 1}}, "reason": "r"}


def test_extract_json_parses_whole_text_without_braces() -> None:
    assert extract_json("[1, 2]") == [1, 2]


def test_extract_json_falls_back_to_first_well_formed_object() -> None:
    # The greedy first-{ to last-} span is not valid JSON here.
    text = 'Keys look like {name}; answer: {"ok": false, "issues": ["x"]}'
    assert extract_json(text) == {"ok": False, "issues": ["x"]}


@pytest.mark.parametrize("text", ["", "no json here", "{broken", "{not: json}"])
def test_extract_json_raises_with_raw_text(text: str) -> None:
    with pytest.raises(UnparsableReplyError) as excinfo:
        extract_json(text)
    assert excinfo.value.raw == text
    assert excinfo.value.to_content() == {"error": excinfo.value.message, "raw": text}


def test_filter_recommendation_scenario() -> None:
    parsed = {"result": {"topSpeed": 200, "range": 500, "color": "red"}, "reason": "ok"}
    assert filter_recommendation(parsed, keys=["topSpeed", "range"]) == (
        {"topSpeed": 200, "range": 500},
        "ok",
    )


def test_filter_recommendation_without_result_uses_whole_object() -> None:
    parsed = {"range": 400, "reason": "ignored", "other": 1}
    assert filter_recommendation(parsed, keys=["range", "reason"]) == (
        {"range": 400, "reason": "ignored"},
        "",
    )


def test_filter_recommendation_defaults_reason() -> None:
    assert filter_recommendation({"result": {"a": 1}}, keys=["a"]) == ({"a": 1}, "")
    assert filter_recommendation({"result": {"a": 1}, "reason": None}, keys=["a"]) == (
        {"a": 1},
        "",
    )


@pytest.mark.parametrize(
    ("parsed", "keys"),
    [
        ({"result": {"x": 1, "y": 2, "z": 3}}, ["x"]),
        ({"result": {"x": 1}}, []),
        ({"x": 1, "y": None}, ["y", "w"]),
        ([{"x": 1}], ["x"]),
        ("x", ["x"]),
        ({"result": ["x"]}, ["x", "result"]),
    ],
)
def test_filtered_keys_are_always_a_subset_of_whitelist(parsed, keys: list[str]) -> None:
    result, reason = filter_recommendation(parsed, keys=keys)
    assert set(result) <= set(keys)
    assert isinstance(reason, str)


def test_filter_recommendation_non_object_result_keeps_reason() -> None:
    parsed = {"result": [1], "reason": "r", "range": 3}
    assert filter_recommendation(parsed, keys=["range"]) == ({}, "r")


def test_filter_recommendation_empty_result_object_still_counts() -> None:
    parsed = {"result": {}, "reason": "nothing to change", "range": 3}
    assert filter_recommendation(parsed, keys=["range"]) == ({}, "nothing to change")


@pytest.mark.parametrize("unset", [None, False, 0, ""])
def test_filter_recommendation_unset_result_uses_whole_object(unset) -> None:
    parsed = {"result": unset, "reason": "r", "range": 3}
    assert filter_recommendation(parsed, keys=["range"]) == ({"range": 3}, "")
