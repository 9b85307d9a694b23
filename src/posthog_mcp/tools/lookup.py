"""Person and event lookup tools.

Every call is validated into a request model before the client is touched,
so invalid arguments never produce a query.

Example:
    Ask: "What did jane@example.com do this week?"
    Uses: lookup_person_by_email(email="jane@example.com", from_date="7d")
"""

from typing import Any

from fastmcp import Context

from posthog_lookup.requests import (
    PersonEventsRequest,
    PersonsByEventRequest,
    PersonWithEventsRequest,
)
from posthog_mcp.context import get_client
from posthog_mcp.errors import handle_errors
from posthog_mcp.server import mcp


@mcp.tool
@handle_errors
async def lookup_person_by_email(
    ctx: Context,
    email: str,
    events_limit: int = 50,
    event_type: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
) -> dict[str, Any]:
    """Look up a PostHog person by email and return their recent events.

    Events default to the last 30 days when from_date is not given.

    Args:
        ctx: FastMCP context with client access.
        email: Email address of the person.
        events_limit: Maximum number of events to return (default 50).
        event_type: Only return events with this name (e.g. '$pageview').
        from_date: Start date, ISO (2024-01-01), 2024/01/01 or relative
            (7d, 24h, 2w, 3m).
        to_date: End date, ISO or relative.

    Returns:
        {"found": true, "person", "events", "count"} or
        {"found": false, "message"} when no person has that email.
    """
    request = PersonWithEventsRequest(
        email=email,
        events_limit=events_limit,
        event_type=event_type,
        from_date=from_date,
        to_date=to_date,
    )
    result = await get_client(ctx).get_person_with_events(**request.to_kwargs())

    if result is None:
        return {"found": False, "message": f"No person found with email: {request.email}"}

    return {
        "found": True,
        "person": result.person.to_dict(),
        "events": [event.to_dict() for event in result.events],
        "count": len(result.events),
    }


@mcp.tool
@handle_errors
async def lookup_persons_by_event(
    ctx: Context,
    event_name: str,
    limit: int = 10,
    from_date: str | None = None,
    to_date: str | None = None,
) -> dict[str, Any]:
    """Find persons who triggered a specific event, most recent first.

    Args:
        ctx: FastMCP context with client access.
        event_name: Event name (e.g. 'signup', '$pageview').
        limit: Maximum number of persons to return (default 10).
        from_date: Start date, ISO or relative.
        to_date: End date, ISO or relative.

    Returns:
        {"persons": [...], "count": n}
    """
    request = PersonsByEventRequest(
        event_name=event_name,
        limit=limit,
        from_date=from_date,
        to_date=to_date,
    )
    persons = await get_client(ctx).get_persons_by_event(**request.to_kwargs())
    return {
        "persons": [person.to_dict() for person in persons],
        "count": len(persons),
    }


@mcp.tool
@handle_errors
async def get_person_events(
    ctx: Context,
    person_id: str,
    limit: int = 50,
    event_type: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
) -> dict[str, Any]:
    """Get events for a PostHog person id, most recent first.

    Events default to the last 30 days when from_date is not given.

    Args:
        ctx: FastMCP context with client access.
        person_id: PostHog person id.
        limit: Maximum number of events to return (default 50).
        event_type: Only return events with this name.
        from_date: Start date, ISO or relative.
        to_date: End date, ISO or relative.

    Returns:
        {"events": [...], "count": n}
    """
    request = PersonEventsRequest(
        person_id=person_id,
        limit=limit,
        event_type=event_type,
        from_date=from_date,
        to_date=to_date,
    )
    events = await get_client(ctx).get_person_events(**request.to_kwargs())
    return {
        "events": [event.to_dict() for event in events],
        "count": len(events),
    }
