"""Context helpers for accessing MCP server state."""

from typing import TYPE_CHECKING

from posthog_lookup import PostHogClient

if TYPE_CHECKING:
    from fastmcp import Context


def get_client(ctx: "Context") -> PostHogClient:
    """Extract the PostHogClient from the FastMCP context.

    Args:
        ctx: The FastMCP Context injected into tool functions.

    Returns:
        The client created by the server lifespan.

    Raises:
        RuntimeError: If the client is not initialized (lifespan not running).
    """
    lifespan_state = ctx.lifespan_context

    if lifespan_state is None or "client" not in lifespan_state:
        raise RuntimeError(
            "PostHog client not initialized. "
            "Ensure the server is running with the lifespan context."
        )

    client: PostHogClient = lifespan_state["client"]
    return client
