"""FastMCP server with lifespan pattern for PostHog lookups.

This module defines the MCP server that wraps posthog_lookup, managing one
PostHogClient for the server session through the lifespan.

Example:
    Run the server over stdio:

    ```python
    from posthog_mcp.server import mcp
    mcp.run()
    ```
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from posthog_lookup import ConfigManager, Credentials, PostHogClient

# Module-level credentials (set by CLI before server starts)
_credentials: Credentials | None = None


def set_credentials(credentials: Credentials | None) -> None:
    """Set the credentials the lifespan builds its client from.

    Args:
        credentials: Resolved credentials, or None to resolve from the
            environment when the server starts.
    """
    global _credentials
    _credentials = credentials


def get_credentials() -> Credentials:
    """Return the configured credentials, resolving them if unset.

    Raises:
        ConfigError: If credentials were not set and cannot be resolved.
    """
    if _credentials is None:
        return ConfigManager().resolve_credentials()
    return _credentials


def create_client(credentials: Credentials) -> PostHogClient:
    """Build the client shared by all tool calls."""
    return PostHogClient(credentials)


@asynccontextmanager
async def lifespan(_server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Manage PostHogClient lifecycle for the MCP server session.

    Args:
        _server: The FastMCP server instance (unused, required by signature).

    Yields:
        Dict containing the client in lifespan state format.
    """
    client = create_client(get_credentials())
    try:
        yield {"client": client}
    finally:
        await client.aclose()


mcp = FastMCP(
    name="posthog-lookup",
    instructions="""PostHog Lookup MCP Server

Read-only tools for looking up PostHog persons and their events:
- lookup_person_by_email: a person and their recent events (last 30 days by default)
- lookup_persons_by_event: persons who triggered an event, most recent first
- get_person_events: events for a known person id

Dates accept ISO format (2024-01-01), 2024/01/01 or relative offsets (24h, 7d, 2w, 3m).
""",
    lifespan=lifespan,
)

# Imports happen here to avoid circular imports
from posthog_mcp.middleware import create_audit_middleware  # noqa: E402

mcp.add_middleware(create_audit_middleware())

# Import tool modules to register them with the server
# These imports must happen after mcp is defined
from posthog_mcp.tools import lookup  # noqa: E402, F401
