"""Shared domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

JSONRPC_VERSION = "2.0"
TOOLS_CALL_METHOD = "tools/call"


@dataclass(frozen=True, slots=True)
class Credential:
    """A bearer token and its absolute expiry (epoch milliseconds)."""

    token: str
    expires_at_ms: int

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_ms


@dataclass(frozen=True, slots=True)
class ToolInvocationRequest:
    """One `tools/call` invocation: tool name plus argument mapping."""

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("tool name must be non-empty")

    def to_jsonrpc(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": 1,
            "method": TOOLS_CALL_METHOD,
            "params": {"name": self.name, "arguments": dict(self.arguments)},
        }


@dataclass(frozen=True, slots=True)
class PlainEnvelope:
    """Structured JSON response; `payload` is `result` or the whole body."""

    payload: Any


@dataclass(frozen=True, slots=True)
class StreamEnvelope:
    """SSE-framed response after unwrapping its first `data:` line."""

    payload: Any
    event: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorEnvelope:
    """JSON-RPC error object, from either framing."""

    code: Any
    message: str
    data: Any = None


Envelope = Union[PlainEnvelope, StreamEnvelope, ErrorEnvelope]


class ResultRecord(BaseModel):
    """A single search hit; unknown keys are kept as metadata."""

    model_config = ConfigDict(extra="allow")

    content: str | None = None
    score: float | None = None

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
