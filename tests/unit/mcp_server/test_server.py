"""Tests for server state: credentials, lifespan and context access."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.config import Credentials
from posthog_lookup.exceptions import ConfigError
from posthog_mcp import server
from posthog_mcp.context import get_client


@pytest.fixture(autouse=True)
def reset_credentials():
    yield
    server.set_credentials(None)


def test_get_credentials_returns_configured(mock_credentials: Credentials) -> None:
    server.set_credentials(mock_credentials)
    assert server.get_credentials() is mock_credentials


def test_get_credentials_resolves_from_environment() -> None:
    with patch(
        "posthog_mcp.server.ConfigManager.resolve_credentials",
        side_effect=ConfigError("POSTHOG_PROJECT_ID environment variable is required."),
    ):
        with pytest.raises(ConfigError):
            server.get_credentials()


@pytest.mark.asyncio
async def test_lifespan_builds_and_closes_client(mock_credentials: Credentials) -> None:
    server.set_credentials(mock_credentials)

    with patch.object(PostHogClient, "aclose") as aclose:
        async with server.lifespan(server.mcp) as state:
            client = state["client"]
            assert isinstance(client, PostHogClient)
            assert client.credentials is mock_credentials
            aclose.assert_not_called()

    aclose.assert_called_once()


def test_get_client_reads_lifespan_state(mock_credentials: Credentials) -> None:
    client = PostHogClient(mock_credentials)
    ctx = SimpleNamespace(lifespan_context={"client": client})
    assert get_client(ctx) is client  # type: ignore[arg-type]


@pytest.mark.parametrize("state", [None, {}])
def test_get_client_without_lifespan(state: dict | None) -> None:
    ctx = SimpleNamespace(lifespan_context=state)
    with pytest.raises(RuntimeError, match="not initialized"):
        get_client(ctx)  # type: ignore[arg-type]
