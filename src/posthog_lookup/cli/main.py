"""CLI entry point for posthog_lookup.

This module provides the `posthog-lookup` command-line interface: a single
command that either looks up one person by email (with their recent events)
or lists the persons who triggered an event.

Usage:
    posthog-lookup [OPTIONS]

Examples:
    posthog-lookup --email user@example.com
    posthog-lookup -e user@example.com --events 20 --event-type '$pageview' --from 7d
    posthog-lookup --event signup --limit 25 --show-properties
    posthog-lookup --event signup --from 2024-01-01 --to 2024-01-31 --format json
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import Annotated

import typer

import posthog_lookup
from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.hogql import (
    DEFAULT_EVENTS_LIMIT,
    DEFAULT_EVENTS_WINDOW,
    DEFAULT_PERSONS_LIMIT,
)
from posthog_lookup.cli.formatters import (
    format_events,
    format_json,
    format_person,
    format_persons_list,
)
from posthog_lookup.cli.options import FormatOption, FromOption, ToOption
from posthog_lookup.cli.utils import (
    ExitCode,
    configure_logging,
    console,
    create_client,
    err_console,
    handle_errors,
)
from posthog_lookup.cli.validators import parse_property_filter, validate_output_format
from posthog_lookup.requests import PersonsByEventRequest, PersonWithEventsRequest
from posthog_lookup.types import Person, PersonWithEvents

app = typer.Typer(
    name="posthog-lookup",
    help="Look up PostHog persons and their events.",
    add_completion=False,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        print(f"posthog-lookup version {posthog_lookup.__version__}")
        raise typer.Exit()


def _handle_interrupt(_signum: int, _frame: object) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    err_console.print("\n[yellow]Interrupted[/yellow]")
    sys.exit(ExitCode.INTERRUPTED)


# Set up signal handler for Ctrl+C
signal.signal(signal.SIGINT, _handle_interrupt)


async def _fetch_person_with_events(
    client: PostHogClient, request: PersonWithEventsRequest
) -> PersonWithEvents | None:
    async with client:
        return await client.get_person_with_events(**request.to_kwargs())


async def _fetch_persons_by_event(
    client: PostHogClient, request: PersonsByEventRequest
) -> list[Person]:
    async with client:
        return await client.get_persons_by_event(**request.to_kwargs())


@app.command()
@handle_errors
def lookup(
    ctx: typer.Context,
    email: Annotated[
        str | None,
        typer.Option("--email", "-e", help="Look up person by email."),
    ] = None,
    event: Annotated[
        str | None,
        typer.Option("--event", help="Find persons who triggered this event."),
    ] = None,
    events: Annotated[
        int,
        typer.Option("--events", help="Number of events to fetch."),
    ] = DEFAULT_EVENTS_LIMIT,
    event_type: Annotated[
        str | None,
        typer.Option("--event-type", help="Filter events by type."),
    ] = None,
    from_date: FromOption = None,
    to_date: ToOption = None,
    limit: Annotated[
        int,
        typer.Option(
            "--limit", help="Limit number of persons when searching by event."
        ),
    ] = DEFAULT_PERSONS_LIMIT,
    properties: Annotated[
        str | None,
        typer.Option(
            "--properties", help="Comma-separated list of properties to show."
        ),
    ] = None,
    show_properties: Annotated[
        bool,
        typer.Option("--show-properties", help="Show full properties for each person."),
    ] = False,
    format: FormatOption = "pretty",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug output."),
    ] = False,
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Look up PostHog persons and their events.

    Use --email for one person and their recent events (last 30 days unless
    --from is given), or --event to list persons who triggered an event.
    """
    output_format = validate_output_format(format)
    configure_logging(verbose)

    if email:
        email_request = PersonWithEventsRequest(
            email=email,
            events_limit=events,
            event_type=event_type,
            from_date=from_date,
            to_date=to_date,
        )
        filter_keys = parse_property_filter(properties)

        time_range = email_request.from_date or DEFAULT_EVENTS_WINDOW
        err_console.print(
            f"Looking up person with email: {email_request.email} "
            f"(events from {time_range})...",
            style="grey50",
            markup=False,
        )
        result = asyncio.run(_fetch_person_with_events(create_client(), email_request))
        if result is None:
            err_console.print(
                f"No person found with email: {email_request.email}",
                style="red",
                markup=False,
            )
            raise typer.Exit(ExitCode.NOT_FOUND)

        if output_format == "json":
            console.print(format_json(result.to_dict()), highlight=False, soft_wrap=True)
            return
        console.print(format_person(result.person, filter_keys))
        console.print(format_events(result.events))
        return

    if event:
        event_request = PersonsByEventRequest(
            event_name=event,
            limit=limit,
            from_date=from_date,
            to_date=to_date,
        )
        persons = asyncio.run(_fetch_persons_by_event(create_client(), event_request))

        if output_format == "json":
            payload = {
                "persons": [person.to_dict() for person in persons],
                "count": len(persons),
            }
            console.print(format_json(payload), highlight=False, soft_wrap=True)
            return
        console.print(format_persons_list(persons, show_properties))
        return

    err_console.print("[yellow]Please provide --email or --event to search.[/yellow]")
    err_console.print(ctx.get_usage(), markup=False, highlight=False)
    err_console.print("Try 'posthog-lookup --help' for help.", markup=False)
    raise typer.Exit(ExitCode.INVALID_ARGS)


if __name__ == "__main__":
    app()
