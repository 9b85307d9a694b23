"""CLI utility functions and error handling.

This module provides shared utilities for the CLI:
- ExitCode enum for standardized exit codes
- handle_errors decorator for exception-to-exit-code mapping
- Console instances for stdout/stderr separation
- Logging setup for --verbose
- Client construction from environment credentials
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Callable
from enum import IntEnum
from typing import Any, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.config import ConfigManager
from posthog_lookup.exceptions import (
    APIError,
    AuthenticationError,
    ConfigError,
    DateParseError,
    PostHogLookupError,
    QueryError,
    RateLimitError,
)

# Console instances for stdout/stderr separation
# Data output goes to stdout; progress/errors go to stderr
console = Console()
err_console = Console(stderr=True, no_color=bool(os.environ.get("NO_COLOR")))


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands.

    Exit codes follow Unix conventions:
    - 0: Success
    - 1-5: Application-specific errors
    - 130: Interrupted by SIGINT (Ctrl+C)
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    INVALID_ARGS = 3
    NOT_FOUND = 4
    RATE_LIMIT = 5
    INTERRUPTED = 130


F = TypeVar("F", bound=Callable[..., Any])


def _format_validation_error(error: ValidationError) -> list[str]:
    """One line per failing field, using CLI-friendly names."""
    lines: list[str] = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        lines.append(f"{location or 'input'}: {item.get('msg', 'invalid value')}")
    return lines


def handle_errors(func: F) -> F:
    """Decorator to convert library exceptions to CLI exit codes.

    Maps PostHogLookupError subclasses to appropriate exit codes and
    displays formatted error messages to stderr.

    Usage:
        @handle_errors
        def my_command(ctx: typer.Context):
            client = create_client()
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except AuthenticationError as e:
            err_console.print(f"[red]Authentication error:[/red] {escape(e.message)}")
            err_console.print(
                "[yellow]Hint:[/yellow] Check POSTHOG_PERSONAL_API_KEY and "
                "that the key has access to this project."
            )
            raise typer.Exit(ExitCode.AUTH_ERROR) from None
        except RateLimitError as e:
            err_console.print(f"[yellow]Rate limited:[/yellow] {escape(e.message)}")
            if e.retry_after:
                err_console.print(
                    f"[cyan]Wait {e.retry_after} seconds before retrying.[/cyan]"
                )
            raise typer.Exit(ExitCode.RATE_LIMIT) from None
        except QueryError as e:
            err_console.print(f"[red]Query error:[/red] {escape(e.message)}")
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except APIError as e:
            err_console.print(f"[red]Error:[/red] {escape(e.message)}")
            raise typer.Exit(ExitCode.GENERAL_ERROR) from None
        except ConfigError as e:
            err_console.print(f"[red]Configuration error:[/red] {escape(e.message)}")
            raise typer.Exit(ExitCode.GENERAL_ERROR) from None
        except DateParseError as e:
            err_console.print(f"[red]Invalid argument:[/red] {escape(e.message)}")
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except PostHogLookupError as e:
            err_console.print(f"[red]Error:[/red] {escape(e.message)}")
            raise typer.Exit(ExitCode.GENERAL_ERROR) from None
        except ValidationError as e:
            err_console.print("[red]Invalid arguments:[/red]")
            for line in _format_validation_error(e):
                err_console.print(f"  {line}", markup=False)
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except ValueError as e:
            err_console.print(f"[red]Invalid argument:[/red] {escape(str(e))}")
            raise typer.Exit(ExitCode.INVALID_ARGS) from None

    return wrapper  # type: ignore[return-value]


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through Rich.

    Args:
        verbose: Enable DEBUG output (queries and raw responses).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def create_client(config: ConfigManager | None = None) -> PostHogClient:
    """Resolve credentials and build a client.

    Args:
        config: ConfigManager to resolve credentials with. Defaults to one
            reading the process environment and ``.env``.

    Returns:
        PostHogClient bound to the resolved credentials.

    Raises:
        ConfigError: If credentials cannot be resolved.
    """
    credentials = (config or ConfigManager()).resolve_credentials()
    return PostHogClient(credentials)
