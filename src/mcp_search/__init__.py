"""MCP search client package."""

from .config import ClientConfig
from .errors import AuthRequired, MalformedResponse, RemoteToolError, SearchClientError, TransportError
from .transport.client import SearchClient, create_client
from .types import ResultRecord

__all__ = [
    "AuthRequired",
    "ClientConfig",
    "MalformedResponse",
    "RemoteToolError",
    "ResultRecord",
    "SearchClient",
    "SearchClientError",
    "TransportError",
    "create_client",
]
