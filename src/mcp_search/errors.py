"""Typed failures raised by the search client."""

from __future__ import annotations

from typing import Any


class SearchClientError(Exception):
    """Base class for every failure surfaced by the client."""


class AuthRequired(SearchClientError):
    """No usable bearer credential could be obtained."""


class TransportError(SearchClientError):
    """Network or HTTP-level failure; `status` is None when no response arrived."""

    def __init__(self, cause: str, *, status: int | None = None) -> None:
        super().__init__(cause)
        self.cause = cause
        self.status = status


class RemoteToolError(SearchClientError):
    """The server answered with a JSON-RPC error envelope."""

    def __init__(self, code: Any, message: str, data: Any = None) -> None:
        super().__init__(f"JSON-RPC Error: {message} (Code: {code})")
        self.code = code
        self.message = message
        self.data = data


class MalformedResponse(SearchClientError):
    """The response body matched none of the recognized shapes."""
