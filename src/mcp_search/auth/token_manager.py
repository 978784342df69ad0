"""Bearer credential lifecycle: lookup, interactive acquisition, and clearing."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator

import httpx

from mcp_search.auth.prompts import TokenPrompt
from mcp_search.auth.storage import EXPIRY_KEY, TOKEN_KEY, TokenStore
from mcp_search.errors import AuthRequired
from mcp_search.types import Credential

logger = logging.getLogger(__name__)


class TokenManager:
    """Owns the single bearer credential for one client instance.

    Expiry is only checked lazily in `acquire`; a held credential is never
    refreshed in the background. Two concurrent `acquire` calls while
    unauthenticated will each run the prompt.
    """

    def __init__(
        self,
        *,
        store: TokenStore,
        prompt: TokenPrompt,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.prompt = prompt
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._credential: Credential | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._credential is not None

    async def acquire(self) -> Credential:
        now_ms = self._now_ms()
        stored = self._load()
        if stored is not None and stored.is_valid(now_ms):
            self._credential = stored
            logger.debug("Using stored access token")
            return stored

        try:
            answer = await self.prompt()
        except Exception as exc:
            raise AuthRequired(f"Failed to initialize OAuth authentication: {exc}") from exc

        token = (answer or "").strip()
        if not token:
            raise AuthRequired("OAuth token is required to access the MCP server")

        credential = Credential(token=token, expires_at_ms=now_ms + self.ttl_seconds * 1000)
        self.store.set(TOKEN_KEY, credential.token)
        self.store.set(EXPIRY_KEY, str(credential.expires_at_ms))
        self._credential = credential
        logger.info("OAuth authentication initialized")
        return credential

    def clear(self) -> None:
        self.store.delete(TOKEN_KEY)
        self.store.delete(EXPIRY_KEY)
        self._credential = None
        logger.info("Authentication tokens cleared")

    def release(self) -> None:
        """Forget the in-memory credential but keep the persisted one."""
        self._credential = None

    def attach(self, request: httpx.Request) -> None:
        if self._credential is not None:
            request.headers["Authorization"] = f"Bearer {self._credential.token}"

    def _load(self) -> Credential | None:
        token = self.store.get(TOKEN_KEY)
        expiry = self.store.get(EXPIRY_KEY)
        if not token or not expiry:
            return None
        try:
            expires_at_ms = int(expiry)
        except ValueError:
            logger.warning("Ignoring stored token with unreadable expiry %r", expiry)
            return None
        return Credential(token=token, expires_at_ms=expires_at_ms)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)


class BearerAuth(httpx.Auth):
    """httpx auth hook that decorates every outgoing request."""

    def __init__(self, manager: TokenManager) -> None:
        self.manager = manager

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self.manager.attach(request)
        yield request
