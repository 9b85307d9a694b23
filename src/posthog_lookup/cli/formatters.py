"""Output formatters for CLI commands.

Pretty output is built as rich ``Text`` so that user data (property values,
event names) is never interpreted as console markup.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from rich.text import Text

from posthog_lookup.types import Event, Person

EVENT_PREVIEW_PROPERTIES = 3


def format_json(data: Any) -> str:
    """Format data as JSON.

    Args:
        data: Data to format (dict, list, or other JSON-serializable).

    Returns:
        Pretty-printed JSON string.
    """
    return json.dumps(data, indent=2, default=str, ensure_ascii=False)


def _value(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def format_properties(
    properties: dict[str, Any], filter_keys: Sequence[str] | None = None
) -> Text:
    """Render ``key: value`` lines, one per property.

    Args:
        properties: Property mapping to render.
        filter_keys: Only these keys, in this order. Keys absent from
            ``properties`` are skipped. None renders every key.

    Returns:
        Indented lines; empty when nothing matches.
    """
    keys = list(filter_keys) if filter_keys is not None else list(properties)
    lines = [
        Text.assemble(("  " + key, "grey50"), ": ", (_value(properties[key]), "white"))
        for key in keys
        if key in properties
    ]
    return Text("\n").join(lines)


def format_event(event: Event) -> Text:
    """Render one event as timestamp, name and a short property preview."""
    preview = ", ".join(
        f"{key}={_value(value)}"
        for key, value in list(event.properties.items())[:EVENT_PREVIEW_PROPERTIES]
    )
    return Text.assemble(
        "  ",
        (event.timestamp, "grey50"),
        " ",
        (event.event, "cyan"),
        " ",
        (preview, "grey50"),
    )


def format_person(person: Person, filter_keys: Sequence[str] | None = None) -> Text:
    """Render the person block: id, distinct ids and properties."""
    distinct_ids = ", ".join(person.distinct_ids) or "N/A"
    parts = [
        Text("\nPerson Found:", style="bold green"),
        Text.assemble(("ID:", "grey50"), " ", person.id),
        Text.assemble(("Distinct IDs:", "grey50"), " ", distinct_ids),
        Text("\nProperties:", style="grey50"),
        format_properties(person.properties, filter_keys),
    ]
    return Text("\n").join(parts)


def format_events(events: Sequence[Event]) -> Text:
    if not events:
        return Text("\nNo events found.", style="yellow")
    lines = [Text(f"\nEvents ({len(events)}):", style="bold blue")]
    lines.extend(format_event(event) for event in events)
    return Text("\n").join(lines)


def format_persons_list(persons: Sequence[Person], show_properties: bool) -> Text:
    """Render a numbered list of persons, labelled by email or id.

    Args:
        persons: Persons to list, in result order.
        show_properties: Also render every property under each person.

    Returns:
        The list, or a notice when there are no persons.
    """
    if not persons:
        return Text("\nNo persons found for this event.", style="yellow")

    lines = [Text(f"\nPersons ({len(persons)}):", style="bold green")]
    for index, person in enumerate(persons, start=1):
        label = person.email or person.id
        lines.append(Text.assemble((f"{index}.", "grey50"), " ", (str(label), "white")))
        if show_properties:
            lines.append(format_properties(person.properties))
            lines.append(Text(""))
    return Text("\n").join(lines)
