"""CLI entry point for the MCP server.

Example:
    Run with default settings (stdio transport):

    ```bash
    posthog-lookup-mcp
    ```

    Run with SSE transport (HTTP Server-Sent Events):

    ```bash
    posthog-lookup-mcp --transport sse --port 8000
    ```
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from posthog_lookup import ConfigManager
from posthog_lookup.exceptions import ConfigError
from posthog_mcp.server import mcp, set_credentials


def parse_args(args: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Command-line arguments to parse. Uses sys.argv if None.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="posthog-lookup-mcp",
        description="MCP server for PostHog person and event lookups",
    )

    parser.add_argument(
        "--transport",
        type=str,
        default="stdio",
        choices=["stdio", "sse"],
        help="Transport type (default: stdio). 'sse' uses HTTP Server-Sent Events.",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only used with --transport sse)",
    )

    return parser.parse_args(args)


def main(args: Sequence[str] | None = None) -> None:
    """Run the MCP server with configured options.

    Entry point for the `posthog-lookup-mcp` command. Credentials are
    resolved before the server starts so configuration errors fail fast.
    """
    parsed = parse_args(args)

    # stdout carries the stdio protocol; logs go to stderr
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        credentials = ConfigManager().resolve_credentials()
    except ConfigError as e:
        sys.stderr.write(f"Configuration error: {e.message}\n")
        sys.exit(1)

    set_credentials(credentials)

    if parsed.transport == "sse":
        mcp.run(transport="sse", port=parsed.port)
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
