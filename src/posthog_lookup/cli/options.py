"""Shared CLI option definitions.

Provides reusable Annotated type aliases for options shared by the lookup
modes.
"""

from __future__ import annotations

from typing import Annotated, Literal

import typer

# Output format type for formatting command output
OutputFormat = Literal["pretty", "json"]

FormatOption = Annotated[
    str,
    typer.Option(
        "--format",
        "-f",
        help="Output format: pretty, json.",
    ),
]

FromOption = Annotated[
    str | None,
    typer.Option(
        "--from",
        help=(
            "Start date: YYYY-MM-DD, YYYY/MM/DD, an ISO date-time, or a relative "
            "offset (24h, 7d, 2w, 3m). Defaults to 30d for events."
        ),
    ),
]

ToOption = Annotated[
    str | None,
    typer.Option(
        "--to",
        help="End date, in the same formats as --from (e.g. 2024-01-31 or 1d).",
    ),
]
