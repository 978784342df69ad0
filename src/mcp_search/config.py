"""Configuration models for the MCP search client."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://escalationbot.fastmcp.app"


class ClientConfig(BaseModel):
    """Configures the remote endpoint, timeouts, and token lifetime."""

    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    mcp_path: str = Field(default="/mcp", min_length=1)
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    token_ttl_seconds: int = Field(default=3600, ge=1)
    user_agent: str = "FastMCP-Python-Client/1.0"
    token_db_path: str | None = None

    @classmethod
    def from_env(cls, base_url: str | None = None) -> "ClientConfig":
        """Build a config from `MCP_*` environment variables.

        `MCP_SERVER_URL` wins over `base_url`; both fall back to the default
        server. A trailing `/mcp` is stripped since the path is added per call.
        """
        raw_url = os.getenv("MCP_SERVER_URL") or base_url or DEFAULT_BASE_URL
        values: dict[str, object] = {"base_url": _clean_base_url(raw_url)}

        timeout = os.getenv("MCP_TIMEOUT_SECONDS")
        if timeout:
            values["timeout_seconds"] = timeout
        token_db = os.getenv("MCP_TOKEN_DB")
        if token_db:
            values["token_db_path"] = token_db
        return cls.model_validate(values)


def _clean_base_url(url: str) -> str:
    cleaned = url.strip().rstrip("/")
    if cleaned.endswith("/mcp"):
        cleaned = cleaned[: -len("/mcp")]
    return cleaned.rstrip("/")
