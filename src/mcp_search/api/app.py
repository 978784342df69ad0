"""Servable ASGI app built from `MCP_*` environment variables.

Run with `uvicorn mcp_search.api.app:app`.
"""

from mcp_search.api.main import create_app

app = create_app()
