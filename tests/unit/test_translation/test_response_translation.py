import json

import pytest

from claude2openai.common.errors import UpstreamDecodeError, UpstreamReportedError
from claude2openai.domain.anthropic import ResponseContentBlock
from claude2openai.translation.response import extract_text, translate_response


def test_unary_response_maps_text_and_usage():
    body = json.dumps(
        {
            "id": "x",
            "model": "m",
            "content": [{"type": "text", "text": "ok"}],
            "usage": {"input_tokens": 3, "output_tokens": 2},
        }
    ).encode()

    resp = translate_response(200, body)
    payload = resp.model_dump()

    assert payload["id"] == "x"
    assert payload["object"] == "chat.completion"
    assert payload["model"] == "m"
    assert isinstance(payload["created"], int)
    assert payload["choices"] == [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "ok"},
            "logprobs": None,
            "finish_reason": "stop",
        }
    ]
    assert payload["usage"] == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}


def test_text_blocks_are_concatenated_skipping_other_types():
    content = [
        ResponseContentBlock(type="text", text="Hel"),
        ResponseContentBlock(type="tool_use"),
        ResponseContentBlock(type=None, text="lo"),
    ]
    assert extract_text(content) == "Hello"


def test_falls_back_to_every_block_when_no_text_block():
    content = [
        ResponseContentBlock(type="output_text", text="a"),
        ResponseContentBlock(type="other", text="b"),
    ]
    assert extract_text(content) == "ab"


def test_empty_content_gives_empty_text():
    assert extract_text([]) == ""


def test_upstream_error_is_passed_through_with_status():
    body = {
        "type": "error",
        "error": {"type": "authentication_error", "message": "invalid x-api-key"},
    }
    with pytest.raises(UpstreamReportedError) as exc_info:
        translate_response(401, json.dumps(body))

    err = exc_info.value
    assert err.status_code == 401
    assert err.to_dict() == {
        "error": {"type": "authentication_error", "message": "invalid x-api-key"}
    }


def test_error_status_without_error_object_is_reported():
    with pytest.raises(UpstreamReportedError) as exc_info:
        translate_response(503, b"{}")
    assert exc_info.value.status_code == 503


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b""])
def test_unparseable_body_raises_decode_error(body):
    with pytest.raises(UpstreamDecodeError) as exc_info:
        translate_response(200, body)
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to parse response from upstream API"


def test_null_content_and_usage_are_tolerated():
    resp = translate_response(200, b'{"id": "x", "model": "m", "content": null, "usage": null}')
    assert resp.choices[0].message.content == ""
    assert resp.usage.total_tokens == 0


@pytest.mark.parametrize(
    "usage, expected",
    [
        ({"input_tokens": None, "output_tokens": 2}, (0, 2, 2)),
        ({"input_tokens": "3", "output_tokens": 2.5}, (0, 0, 0)),
        ({"input_tokens": 3, "output_tokens": True}, (3, 0, 3)),
        ("lots", (0, 0, 0)),
    ],
)
def test_malformed_usage_counters_count_as_zero(usage, expected):
    resp = translate_response(
        200, {"content": [{"type": "text", "text": "ok"}], "usage": usage}
    )
    assert resp.choices[0].message.content == "ok"
    assert (
        resp.usage.prompt_tokens,
        resp.usage.completion_tokens,
        resp.usage.total_tokens,
    ) == expected


def test_non_string_fields_in_content_blocks_are_ignored():
    resp = translate_response(
        200,
        {
            "id": 42,
            "model": None,
            "content": [
                {"type": "text", "text": "ok"},
                {"type": "tool_use", "text": 5},
                {"type": 7, "text": {"nested": True}},
                "stray",
            ],
            "usage": {"input_tokens": 1, "output_tokens": 1},
        },
    )
    assert resp.choices[0].message.content == "ok"
    assert resp.id == ""
    assert resp.model == ""
