"""Transform functions for HogQL result rows.

Converts tuple rows returned by the query endpoint into Person and Event
records. The properties column arrives as JSON text; a malformed or
non-object payload degrades to an empty mapping instead of failing the
whole lookup.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from posthog_lookup.types import Event, Person

_logger = logging.getLogger(__name__)


def parse_properties(raw: Any) -> dict[str, Any]:
    """Decode a properties column into a dict.

    Args:
        raw: JSON text from the properties column. An already-decoded dict
            is passed through.

    Returns:
        The decoded mapping, or an empty dict when the value is not valid
        JSON, decodes to something other than an object, or is neither a
        string nor a dict.

    Example:
        ```python
        parse_properties('{"email": "a@example.com"}')  # {"email": "a@example.com"}
        parse_properties("not json")                    # {}
        parse_properties("[1, 2]")                      # {}
        ```
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str | bytes | bytearray):
        if raw is not None:
            _logger.debug("Ignoring non-text properties value: %r", type(raw))
        return {}

    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        _logger.debug("Ignoring malformed properties JSON: %.200r", raw)
        return {}

    if not isinstance(decoded, dict):
        _logger.debug("Ignoring non-object properties JSON: %.200r", raw)
        return {}
    return decoded


def transform_person_row(row: Sequence[Any]) -> Person:
    """Transform an ``(id, properties)`` row into a Person.

    HogQL lookups never select distinct ids, so ``distinct_ids`` is empty.
    """
    person_id, properties = row[0], row[1]
    return Person(
        id=str(person_id),
        distinct_ids=[],
        properties=parse_properties(properties),
    )


def transform_event_row(row: Sequence[Any]) -> Event:
    """Transform an ``(event, timestamp, properties)`` row into an Event."""
    event, timestamp, properties = row[0], row[1], row[2]
    return Event(
        event=str(event),
        timestamp=str(timestamp),
        properties=parse_properties(properties),
    )
