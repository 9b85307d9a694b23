"""Error handling for MCP tools.

This module provides a decorator for converting posthog_lookup exceptions
to FastMCP ToolError with appropriate messages and actionable guidance.

Example:
    ```python
    @mcp.tool
    @handle_errors
    async def get_person_events(ctx: Context, person_id: str) -> dict:
        client = get_client(ctx)
        events = await client.get_person_events(person_id)
        return {"events": [e.to_dict() for e in events], "count": len(events)}
    ```
"""

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from fastmcp.exceptions import ToolError
from pydantic import ValidationError

from posthog_lookup.exceptions import (
    AuthenticationError,
    ConfigError,
    DateParseError,
    PostHogLookupError,
    QueryError,
    RateLimitError,
    ServerError,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def format_rich_error(
    summary: str,
    details: PostHogLookupError | dict[str, Any],
    suggestions: list[str] | None = None,
) -> str:
    """Format error with structured details for agent parsing.

    Creates an error message with three parts:
    1. Human-readable summary line
    2. JSON block with full error details (parseable by agents)
    3. Actionable suggestions

    Args:
        summary: Human-readable summary line.
        details: The exception (serialized with its to_dict()) or an
            already-built details mapping.
        suggestions: Optional list of actionable suggestions.

    Returns:
        Formatted error message with embedded JSON.
    """
    if isinstance(details, PostHogLookupError):
        details = details.to_dict()

    lines = [summary, "", "Error Details:", json.dumps(details, indent=2, default=str)]

    if suggestions:
        lines.append("")
        lines.append("Suggestions:")
        for suggestion in suggestions:
            lines.append(f"- {suggestion}")

    return "\n".join(lines)


def _validation_details(error: ValidationError) -> dict[str, Any]:
    return {
        "code": "INVALID_ARGUMENTS",
        "errors": [
            {
                "field": ".".join(str(part) for part in item.get("loc", ())),
                "message": item.get("msg", "invalid value"),
            }
            for item in error.errors()
        ],
    }


def _handle_exception(e: Exception) -> None:
    """Handle an exception and convert it to ToolError.

    Args:
        e: The exception to handle.

    Raises:
        ToolError: Always raises with appropriate formatting.
    """
    if isinstance(e, ValidationError):
        logger.info("Invalid tool arguments: %s", e)
        suggestions = [
            "Required strings must not be blank and limits must be at least 1",
            "Dates accept 2024-01-01, 2024/01/01, ISO date-times "
            "or relative offsets (24h, 7d, 2w, 3m)",
        ]
        raise ToolError(
            format_rich_error("Invalid arguments.", _validation_details(e), suggestions)
        ) from e

    if isinstance(e, DateParseError):
        logger.info("Invalid date: %s", e.expression)
        suggestions = [
            "Use a date (2024-01-01 or 2024/01/01) "
            "or a relative offset (24h, 7d, 2w, 3m)",
        ]
        raise ToolError(format_rich_error(str(e), e, suggestions)) from e

    # API errors - specific types first
    if isinstance(e, RateLimitError):
        logger.warning("Rate limited: retry_after=%s", e.retry_after)
        retry_msg = (
            f"Retry after {e.retry_after} seconds."
            if e.retry_after
            else "Wait before retrying."
        )
        raise ToolError(
            format_rich_error("Rate limited by PostHog API.", e, [retry_msg])
        ) from e

    if isinstance(e, AuthenticationError):
        logger.warning("Authentication failed: %s", e)
        suggestions = [
            "Check POSTHOG_PERSONAL_API_KEY is a valid personal API key",
            "Verify POSTHOG_PROJECT_ID and POSTHOG_REGION match the project",
        ]
        raise ToolError(
            format_rich_error("Authentication failed.", e, suggestions)
        ) from e

    if isinstance(e, ServerError):
        logger.warning("Server error: status_code=%s", e.status_code)
        suggestions = [
            "This may be a transient issue - try again in a few moments",
        ]
        raise ToolError(
            format_rich_error(
                f"PostHog server error (HTTP {e.status_code}).", e, suggestions
            )
        ) from e

    if isinstance(e, QueryError):
        logger.warning("Query error: %s", e)
        suggestions = [
            "Check the event name, person id and date range for typos",
        ]
        raise ToolError(
            format_rich_error(f"Query error (HTTP {e.status_code}).", e, suggestions)
        ) from e

    if isinstance(e, ConfigError):
        logger.warning("Config error: %s", e)
        suggestions = [
            "Set POSTHOG_PERSONAL_API_KEY and POSTHOG_PROJECT_ID",
            "POSTHOG_REGION must be 'us' or 'eu'",
        ]
        raise ToolError(format_rich_error(str(e), e, suggestions)) from e

    # Catch-all for any other PostHogLookupError
    if isinstance(e, PostHogLookupError):
        logger.warning("Unhandled PostHogLookupError: %s", e)
        raise ToolError(format_rich_error(f"PostHog error: {e}", e)) from e

    if isinstance(e, ValueError):
        logger.info("Invalid argument: %s", e)
        raise ToolError(
            format_rich_error(
                f"Invalid argument: {e}", {"code": "INVALID_ARGUMENTS", "message": str(e)}
            )
        ) from e

    # Catch unexpected exceptions to prevent unhandled crashes
    logger.exception("Unexpected error in tool")
    error_details = {
        "code": "UNEXPECTED_ERROR",
        "type": type(e).__name__,
        "message": str(e),
    }
    raise ToolError(
        format_rich_error(f"Unexpected error: {type(e).__name__}: {e}", error_details)
    ) from e


def handle_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to convert posthog_lookup exceptions to FastMCP ToolError.

    Supports both synchronous and asynchronous functions.

    Args:
        func: The tool function to wrap.

    Returns:
        The wrapped function that converts exceptions.
    """
    if asyncio.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await cast(Coroutine[Any, Any, R], func(*args, **kwargs))
            except ToolError:
                raise
            except Exception as e:
                _handle_exception(e)
                raise  # Should not reach here, but satisfies type checker

        return cast(Callable[P, R], async_wrapper)

    @wraps(func)
    def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except ToolError:
            raise
        except Exception as e:
            _handle_exception(e)
            raise  # Should not reach here, but satisfies type checker

    return cast(Callable[P, R], sync_wrapper)
