"""Fixtures for MCP server tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest
from fastmcp import Client

from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.config import Credentials
from posthog_mcp import server
from posthog_mcp.tools import lookup
from tests.conftest import Handler


@pytest.fixture
def mcp_client_factory(
    monkeypatch: pytest.MonkeyPatch, mock_credentials: Credentials
) -> Iterator[Callable[[Handler], Client]]:
    """Factory for in-memory MCP clients whose tools query a MockTransport.

    Usage:
        async def test_tool(mcp_client_factory):
            async with mcp_client_factory(handler) as client:
                result = await client.call_tool("get_person_events", {...})
    """

    def factory(handler: Handler) -> Client:
        posthog = PostHogClient(mock_credentials, _transport=httpx.MockTransport(handler))
        monkeypatch.setattr(lookup, "get_client", lambda _ctx: posthog)
        server.set_credentials(mock_credentials)
        return Client(server.mcp)

    yield factory
    server.set_credentials(None)
