"""Async JSON-RPC client for MCP `tools/call` with OAuth bearer auth."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from mcp_search.auth.prompts import ConsoleTokenPrompt, TokenPrompt
from mcp_search.auth.storage import InMemoryTokenStore, SqliteTokenStore, TokenStore
from mcp_search.auth.token_manager import BearerAuth, TokenManager
from mcp_search.config import ClientConfig
from mcp_search.errors import SearchClientError, TransportError
from mcp_search.obs.tracing import CallTrace, Timer, utc_timestamp
from mcp_search.transport.normalizer import classify, decode_body, extract_results, resolve_payload
from mcp_search.types import Envelope, ErrorEnvelope, ResultRecord, StreamEnvelope, ToolInvocationRequest

logger = logging.getLogger(__name__)

_ACCEPT = "application/json, text/event-stream"
_MAX_ERROR_BODY = 500


class SearchClient:
    """Calls remote MCP tools and normalizes their answers into result records.

    One instance owns one `TokenManager`; nothing is shared between clients.
    Calls are never retried: every failure is raised to the caller as a
    `SearchClientError` subclass.
    """

    def __init__(
        self,
        config: ClientConfig,
        tokens: TokenManager,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        observer: Callable[[CallTrace], None] | None = None,
    ) -> None:
        self.config = config
        self.tokens = tokens
        self._observer = observer
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers={
                "Content-Type": "application/json",
                "Accept": _ACCEPT,
                "User-Agent": config.user_agent,
            },
            auth=BearerAuth(tokens),
            transport=transport,
        )

    async def __aenter__(self) -> "SearchClient":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.aclose()

    def set_observer(self, observer: Callable[[CallTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool call."""
        self._observer = observer

    async def initialize_auth(self) -> None:
        await self.tokens.acquire()

    def clear_auth(self) -> None:
        self.tokens.clear()

    async def close(self) -> None:
        """Forget the in-memory credential; the next call re-acquires it."""
        self.tokens.release()
        logger.info("MCP client closed")

    async def aclose(self) -> None:
        """Release the credential and shut down the HTTP connection pool."""
        self.tokens.release()
        await self._http.aclose()
        logger.info("MCP client connection pool closed")

    async def invoke_tool(
        self, name: str, arguments: Mapping[str, Any] | None = None
    ) -> list[ResultRecord]:
        return await self._execute(ToolInvocationRequest(name, dict(arguments or {})), extract=True)

    async def invoke_tool_raw(self, name: str, arguments: Mapping[str, Any] | None = None) -> Any:
        """Return the resolved payload without result extraction."""
        return await self._execute(ToolInvocationRequest(name, dict(arguments or {})), extract=False)

    async def search(self, search_text: str, search_type: str = "hybrid") -> list[ResultRecord]:
        results = await self.invoke_tool(
            "search", {"search_text": search_text, "search_type": search_type}
        )
        logger.debug("search type=%s returned %d results", search_type, len(results))
        return results

    async def test_connection(self) -> bool:
        """Trial search, then a bare GET on the service root; never raises."""
        try:
            await self.search("test connection", "hybrid")
            return True
        except Exception as exc:
            logger.warning("Connection test search failed: %s", exc)

        try:
            response = await self._http.get("/")
        except Exception as exc:
            logger.warning("Server ping failed: %s", exc)
            return False
        logger.info("Server ping returned %s", response.status_code)
        return response.is_success

    async def _execute(self, request: ToolInvocationRequest, *, extract: bool) -> Any:
        outcome = "ok"
        envelope: Envelope | None = None
        result_count = 0
        timer = Timer()
        try:
            with timer:
                envelope = await self._send(request)
                payload = resolve_payload(envelope)
                if extract:
                    payload = extract_results(payload)
                    result_count = len(payload)
        except SearchClientError as exc:
            outcome = type(exc).__name__
            logger.error("Tool call %s failed: %s", request.name, exc)
            raise
        finally:
            self._observe(request, outcome, envelope, result_count, timer.elapsed_ms)
        return payload

    async def _send(self, request: ToolInvocationRequest) -> Envelope:
        if self._http.is_closed:
            raise TransportError("MCP client connection pool is closed")
        await self.tokens.acquire()
        logger.debug("POST %s%s tool=%s", self.config.base_url, self.config.mcp_path, request.name)
        try:
            response = await self._http.post(self.config.mcp_path, json=request.to_jsonrpc())
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Timed out after {self.config.timeout_seconds}s waiting for MCP server at {self.config.base_url}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(
                f"MCP server returned error {status}: {exc.response.reason_phrase}\n"
                f"Response: {exc.response.text[:_MAX_ERROR_BODY]}",
                status=status,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"Network error connecting to MCP server at {self.config.base_url}: {exc}"
            ) from exc

        envelope = classify(decode_body(response.text))
        logger.debug("Response classified as %s", _envelope_kind(envelope))
        return envelope

    def _observe(
        self,
        request: ToolInvocationRequest,
        outcome: str,
        envelope: Envelope | None,
        result_count: int,
        latency_ms: float,
    ) -> None:
        if self._observer is None:
            return
        self._observer(
            CallTrace(
                tool=request.name,
                arguments=dict(request.arguments),
                outcome=outcome,
                envelope=_envelope_kind(envelope),
                result_count=result_count,
                latency_ms=latency_ms,
                timestamp_utc=utc_timestamp(),
            )
        )


def create_client(
    config: ClientConfig | None = None,
    *,
    store: TokenStore | None = None,
    prompt: TokenPrompt | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    observer: Callable[[CallTrace], None] | None = None,
) -> SearchClient:
    """Wire a client with its own token manager.

    Defaults: config from the environment, SQLite token storage when
    `MCP_TOKEN_DB` is configured (in-memory otherwise), console prompt.
    """
    config = config or ClientConfig.from_env()
    if store is None:
        store = SqliteTokenStore(config.token_db_path) if config.token_db_path else InMemoryTokenStore()
    tokens = TokenManager(
        store=store,
        prompt=prompt or ConsoleTokenPrompt(),
        ttl_seconds=config.token_ttl_seconds,
    )
    logger.info("Creating MCP client for %s", config.base_url)
    return SearchClient(config, tokens, transport=transport, observer=observer)


def _envelope_kind(envelope: Envelope | None) -> str | None:
    if envelope is None:
        return None
    if isinstance(envelope, ErrorEnvelope):
        return "error"
    if isinstance(envelope, StreamEnvelope):
        return "stream"
    return "plain"
