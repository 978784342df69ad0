"""Token acquisition strategies injected into the token manager."""

from __future__ import annotations

import getpass
import os
from collections.abc import Awaitable, Callable

TokenPrompt = Callable[[], Awaitable[str | None]]

PROMPT_MESSAGE = (
    "Please enter your FastMCP OAuth access token.\n\n"
    "To get your token:\n"
    "1. Go to your FastMCP dashboard\n"
    "2. Navigate to API Keys/Authentication settings\n"
    "3. Generate or copy your OAuth access token\n"
    "4. Paste it here: "
)


class ConsoleTokenPrompt:
    """Asks for the token on the terminal without echoing it."""

    def __init__(self, message: str = PROMPT_MESSAGE) -> None:
        self.message = message

    async def __call__(self) -> str | None:
        return getpass.getpass(self.message)


class EnvTokenPrompt:
    """Reads the token from an environment variable at acquisition time."""

    def __init__(self, var: str = "MCP_ACCESS_TOKEN") -> None:
        self.var = var

    async def __call__(self) -> str | None:
        return os.getenv(self.var)


class StaticTokenPrompt:
    """Always answers with the same token; counts how often it was asked."""

    def __init__(self, token: str | None) -> None:
        self.token = token
        self.calls = 0

    async def __call__(self) -> str | None:
        self.calls += 1
        return self.token
