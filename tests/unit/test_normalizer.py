import json

import pytest

from mcp_search.errors import MalformedResponse, RemoteToolError
from mcp_search.transport.normalizer import classify, decode_body, extract_results, resolve_payload
from mcp_search.types import ErrorEnvelope, PlainEnvelope, StreamEnvelope


def test_decode_body_keeps_non_json_text() -> None:
    assert decode_body('{"result": {}}') == {"result": {}}
    assert decode_body("event: message\ndata: {}") == "event: message\ndata: {}"
    assert decode_body("") == ""


def test_classify_plain_error_result_and_bare_object() -> None:
    error = classify({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})
    assert error == ErrorEnvelope(code=-32601, message="nope", data=None)

    plain = classify({"jsonrpc": "2.0", "id": 1, "result": {"results": []}})
    assert plain == PlainEnvelope(payload={"results": []})

    bare = classify({"content": "hello"})
    assert bare == PlainEnvelope(payload={"content": "hello"})

    assert classify([{"content": "a"}]) == PlainEnvelope(payload=[{"content": "a"}])


def test_classify_null_error_falls_through_to_result() -> None:
    envelope = classify({"error": None, "result": {"results": [{"content": "x"}]}})
    assert isinstance(envelope, PlainEnvelope)


def test_classify_rejects_json_scalars() -> None:
    with pytest.raises(MalformedResponse):
        classify(42)
    with pytest.raises(MalformedResponse):
        classify(None)


def test_classify_stream_unwraps_double_encoded_text() -> None:
    inner = {"results": [{"content": "a", "score": 0.5}]}
    text = "event: message\ndata: " + json.dumps(
        {"jsonrpc": "2.0", "id": 1, "result": {"content": [{"type": "text", "text": json.dumps(inner)}]}}
    )

    envelope = classify(text)

    assert envelope == StreamEnvelope(payload=inner, event="message")


def test_classify_stream_uses_result_when_no_text_content() -> None:
    text = 'data: {"jsonrpc": "2.0", "id": 1, "result": {"results": [{"content": "b"}]}}\r\n'
    envelope = classify(text)
    assert isinstance(envelope, StreamEnvelope)
    assert envelope.payload == {"results": [{"content": "b"}]}
    assert envelope.event is None


def test_classify_stream_falls_back_to_whole_message_without_result() -> None:
    envelope = classify('data: {"results": [{"content": "c"}]}')
    assert envelope.payload == {"results": [{"content": "c"}]}


def test_classify_stream_error_envelope() -> None:
    envelope = classify('data: {"jsonrpc": "2.0", "id": 1, "error": {"code": 7, "message": "bad"}}')
    assert envelope == ErrorEnvelope(code=7, message="bad", data=None)


def test_classify_stream_failures_are_malformed() -> None:
    with pytest.raises(MalformedResponse, match="No data line"):
        classify("event: ping\n\n")
    with pytest.raises(MalformedResponse):
        classify("data: {not json")
    with pytest.raises(MalformedResponse):
        classify("data: [1, 2]")
    with pytest.raises(MalformedResponse):
        classify('data: {"result": {"content": [{"type": "text", "text": "plain words"}]}}')


def test_resolve_payload_raises_remote_error() -> None:
    with pytest.raises(RemoteToolError) as excinfo:
        resolve_payload(ErrorEnvelope(code=7, message="bad", data={"hint": "x"}))

    assert excinfo.value.code == 7
    assert excinfo.value.data == {"hint": "x"}
    assert str(excinfo.value) == "JSON-RPC Error: bad (Code: 7)"
    assert resolve_payload(PlainEnvelope(payload=[1])) == [1]


def test_extract_results_precedence() -> None:
    top_level = {"results": [{"content": "top"}], "data": {"results": [{"content": "nested"}]}}
    assert [r.content for r in extract_results(top_level)] == ["top"]

    nested = {"data": {"results": [{"content": "nested"}]}, "content": "ignored"}
    assert [r.content for r in extract_results(nested)] == ["nested"]

    assert [r.content for r in extract_results([{"content": "bare"}])] == ["bare"]

    single = extract_results({"content": "hello", "score": 0.9})
    assert [r.as_dict() for r in single] == [{"content": "hello", "score": 0.9}]


def test_extract_results_keeps_metadata_and_order() -> None:
    payload = {
        "results": [
            {"content": "first", "score": 0.9, "metadata": {"source": "a.md"}},
            {"content": "second", "score": 0.4, "chunk_id": "c-2"},
        ]
    }

    records = extract_results(payload)

    assert [r.content for r in records] == ["first", "second"]
    assert records[0].metadata == {"metadata": {"source": "a.md"}}
    assert records[1].as_dict() == {"content": "second", "score": 0.4, "chunk_id": "c-2"}


def test_extract_results_unrecognized_shape_is_empty() -> None:
    assert extract_results({"status": "ok"}) == []
    assert extract_results(None) == []
    assert extract_results({"results": None}) == []


def test_extract_results_rejects_invalid_items() -> None:
    with pytest.raises(MalformedResponse):
        extract_results({"results": ["just a string"]})
    with pytest.raises(MalformedResponse):
        extract_results({"results": [{"content": "ok", "score": "high"}]})


def test_classify_stream_keeps_empty_result_object() -> None:
    envelope = classify('data: {"jsonrpc": "2.0", "id": 1, "result": {}}')
    assert envelope.payload == {}


def test_extract_results_content_without_text_blocks() -> None:
    [record] = extract_results({"content": [{"type": "image"}], "score": 0.2})

    assert record.content is None
    assert record.score == 0.2
    assert record.metadata == {"raw_content": [{"type": "image"}]}
