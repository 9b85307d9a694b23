"""MCP server exposing posthog_lookup to AI assistants.

Example:
    Run the server for Claude Desktop:

    ```bash
    posthog-lookup-mcp
    ```
"""

from posthog_mcp.server import mcp

__all__ = ["mcp"]
__version__ = "0.1.0"
