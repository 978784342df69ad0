"""Response classification and result extraction for MCP tool calls.

The server answers `tools/call` in one of several dialects:

- a plain JSON-RPC envelope (`{"result": ...}` or `{"error": ...}`),
- a bare JSON object or array with no envelope at all,
- an SSE body whose first `data:` line carries the JSON-RPC envelope, often
  with the tool output double-encoded as `result.content[0].text`.

`classify` maps a decoded body onto one of the closed `Envelope` shapes
before any extraction runs, so the rest of the pipeline never inspects raw
bodies.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from mcp_search.errors import MalformedResponse, RemoteToolError
from mcp_search.types import Envelope, ErrorEnvelope, PlainEnvelope, ResultRecord, StreamEnvelope

logger = logging.getLogger(__name__)

_DATA_PREFIX = "data: "
_EVENT_PREFIX = "event:"


def decode_body(text: str) -> Any:
    """Return the parsed JSON body, or the raw text when it is not JSON.

    A body holding a JSON string literal decodes to that string and is
    classified as text.
    """
    try:
        return json.loads(text)
    except ValueError:
        return text


def classify(body: Any) -> Envelope:
    if isinstance(body, str):
        return _classify_stream(body)
    if isinstance(body, Mapping):
        if body.get("error") is not None:
            return _error_envelope(body["error"])
        if "result" in body:
            return PlainEnvelope(payload=body["result"])
        return PlainEnvelope(payload=dict(body))
    if isinstance(body, list):
        return PlainEnvelope(payload=body)
    raise MalformedResponse(f"Unrecognized response body of type {type(body).__name__}")


def resolve_payload(envelope: Envelope) -> Any:
    if isinstance(envelope, ErrorEnvelope):
        raise RemoteToolError(envelope.code, envelope.message, envelope.data)
    return envelope.payload


def extract_results(payload: Any) -> list[ResultRecord]:
    """Pull result records out of a resolved payload.

    Precedence: `results` list, then `data.results` list, then a bare list,
    then a single record carrying `content`. Anything else yields an empty
    list, which is indistinguishable from "no matches" for callers.
    """
    if isinstance(payload, Mapping):
        results = payload.get("results")
        if isinstance(results, list):
            return _to_records(results)

        data = payload.get("data")
        if isinstance(data, Mapping) and isinstance(data.get("results"), list):
            return _to_records(data["results"])

    if isinstance(payload, list):
        return _to_records(payload)

    if isinstance(payload, Mapping) and payload.get("content") is not None:
        return _to_records([_single_record(payload)])

    if isinstance(payload, Mapping):
        logger.warning("No recognizable results structure; keys=%s", sorted(payload))
    else:
        logger.warning("No recognizable results structure; payload type=%s", type(payload).__name__)
    return []


def _classify_stream(text: str) -> StreamEnvelope | ErrorEnvelope:
    event: str | None = None
    data_line: str | None = None
    for line in text.splitlines():
        if line.startswith(_EVENT_PREFIX):
            event = line[len(_EVENT_PREFIX):].strip() or None
        elif line.startswith(_DATA_PREFIX):
            data_line = line[len(_DATA_PREFIX):]
            break

    if data_line is None:
        raise MalformedResponse("No data line found in SSE response")

    try:
        message = json.loads(data_line)
    except ValueError as exc:
        raise MalformedResponse(f"Failed to parse SSE response: {exc}") from exc
    if not isinstance(message, Mapping):
        raise MalformedResponse("SSE data line is not a JSON-RPC object")

    if message.get("error") is not None:
        return _error_envelope(message["error"])

    result = message.get("result")
    nested_text = _first_content_text(result)
    if nested_text is not None:
        try:
            payload = json.loads(nested_text)
        except ValueError as exc:
            raise MalformedResponse(f"Failed to parse SSE response: {exc}") from exc
        return StreamEnvelope(payload=payload, event=event)

    return StreamEnvelope(payload=result if result is not None else dict(message), event=event)


def _first_content_text(result: Any) -> str | None:
    if not isinstance(result, Mapping):
        return None
    content = result.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, Mapping):
        return None
    text = first.get("text")
    if isinstance(text, str) and text:
        return text
    return None


def _single_record(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten non-string `content` (MCP content blocks) into text.

    The original value is kept under `raw_content`.
    """
    record = dict(payload)
    content = record["content"]
    if isinstance(content, str):
        return record

    blocks = content if isinstance(content, list) else [content]
    texts = [
        block["text"]
        for block in blocks
        if isinstance(block, Mapping) and isinstance(block.get("text"), str)
    ]
    record["raw_content"] = content
    record["content"] = "\n".join(texts) if texts else None
    return record


def _error_envelope(error: Any) -> ErrorEnvelope:
    if isinstance(error, Mapping):
        return ErrorEnvelope(
            code=error.get("code"),
            message=str(error.get("message", "")),
            data=error.get("data"),
        )
    return ErrorEnvelope(code=None, message=str(error))


def _to_records(items: list[Any]) -> list[ResultRecord]:
    records: list[ResultRecord] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise MalformedResponse(f"Result #{index + 1} is not an object")
        try:
            records.append(ResultRecord.model_validate(dict(item)))
        except ValidationError as exc:
            raise MalformedResponse(f"Result #{index + 1} is invalid: {exc}") from exc
    return records
