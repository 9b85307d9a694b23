"""CLI parameter validators for Literal types.

Validates string inputs from Typer against Literal types, providing early
error feedback before any credentials are resolved.
"""

from __future__ import annotations

from typing import Any, cast, get_args

import typer
from rich.markup import escape

from posthog_lookup.cli.options import OutputFormat
from posthog_lookup.cli.utils import ExitCode, err_console


def validate_literal(value: str, literal_type: Any, param_name: str) -> Any:
    """Validate a CLI string against a Literal type.

    Args:
        value: String value from CLI.
        literal_type: The Literal type to validate against.
        param_name: Parameter name for error message.

    Returns:
        The validated value, cast to the Literal type.

    Raises:
        typer.Exit: With code 3 (INVALID_ARGS) if invalid.
    """
    valid_values = get_args(literal_type)
    if value not in valid_values:
        err_console.print(
            f"[red]Error:[/red] Invalid value for {param_name}: '{escape(value)}'"
        )
        err_console.print(f"Valid options: {', '.join(valid_values)}")
        raise typer.Exit(ExitCode.INVALID_ARGS)
    return value


def validate_output_format(value: str, param_name: str = "--format") -> OutputFormat:
    """Validate the output format.

    Args:
        value: String value from CLI (should be "pretty" or "json").
        param_name: Parameter name for error message. Default: "--format".

    Returns:
        Validated value as OutputFormat literal type.

    Raises:
        typer.Exit: With code 3 (INVALID_ARGS) if value is invalid.
    """
    validate_literal(value, OutputFormat, param_name)
    return cast(OutputFormat, value)


def parse_property_filter(value: str | None) -> list[str] | None:
    """Split a comma-separated ``--properties`` value into keys.

    Args:
        value: Raw option value, e.g. ``"email, name,plan"``.

    Returns:
        Stripped, non-empty keys in order, or None when no filter is given.
    """
    if value is None:
        return None
    keys = [key.strip() for key in value.split(",")]
    return [key for key in keys if key]
