"""Result types for posthog_lookup operations.

All result types are immutable frozen dataclasses with a ``to_dict()``
method returning JSON-serializable output. They are transient values scoped
to a single lookup call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# =============================================================================
# Query Parameters
# =============================================================================


@dataclass(frozen=True)
class TimeframeOptions:
    """Optional lower/upper bound on event timestamps.

    Each bound is either an absolute ISO date/date-time (``2024-01-01``) or a
    relative offset from now (``24h``, ``7d``, ``2w``, ``3m``). Neither bound
    set means the query is unbounded in time.
    """

    from_date: str | None = None
    """Lower bound (inclusive), or None."""

    to_date: str | None = None
    """Upper bound (inclusive), or None."""


# =============================================================================
# Domain Records
# =============================================================================


@dataclass(frozen=True)
class Person:
    """A tracked end-user identity with its properties."""

    id: str
    """PostHog person UUID."""

    distinct_ids: list[str] = field(default_factory=list)
    """Distinct ids linked to the person (not populated by HogQL lookups)."""

    properties: dict[str, Any] = field(default_factory=dict)
    """Person properties (email, name, plan, ...)."""

    @property
    def email(self) -> str | None:
        """The ``email`` property, if it is a string."""
        value = self.properties.get("email")
        return value if isinstance(value, str) else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "id": self.id,
            "distinct_ids": list(self.distinct_ids),
            "properties": self.properties,
        }


@dataclass(frozen=True)
class Event:
    """A single recorded event attributed to a person."""

    event: str
    """Event name."""

    timestamp: str
    """Event timestamp as returned by PostHog."""

    properties: dict[str, Any] = field(default_factory=dict)
    """Event properties."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "event": self.event,
            "timestamp": self.timestamp,
            "properties": self.properties,
        }


@dataclass(frozen=True)
class PersonWithEvents:
    """A person together with their most recent events (newest first)."""

    person: Person
    events: list[Event] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "person": self.person.to_dict(),
            "events": [event.to_dict() for event in self.events],
        }


# =============================================================================
# Query API Envelope
# =============================================================================


@dataclass(frozen=True)
class QueryResult:
    """Tabular response envelope from the HogQL query endpoint.

    Attributes:
        columns: Selected column names, in order.
        types: Column types reported by PostHog.
        results: Row tuples; each row has one value per column.
        has_more: Whether more rows matched than were returned.
        limit: Row limit applied by PostHog.
        offset: Row offset applied by PostHog.
    """

    columns: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    results: list[tuple[Any, ...]] = field(default_factory=list)
    has_more: bool = False
    limit: int = 0
    offset: int = 0

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> QueryResult:
        """Build a QueryResult from the decoded JSON response.

        Missing keys take their empty defaults.

        Args:
            payload: Decoded JSON body of a successful query response.

        Returns:
            Typed QueryResult.
        """
        raw_types = payload.get("types") or []
        return cls(
            columns=[str(c) for c in payload.get("columns") or []],
            # PostHog reports types either as names or as [name, type] pairs
            types=[
                str(t[1]) if isinstance(t, list) and len(t) > 1 else str(t)
                for t in raw_types
            ],
            results=[tuple(row) for row in payload.get("results") or []],
            has_more=bool(payload.get("hasMore", False)),
            limit=int(payload.get("limit") or 0),
            offset=int(payload.get("offset") or 0),
        )

    def __len__(self) -> int:
        """Number of rows returned."""
        return len(self.results)

    def to_dicts(self) -> list[dict[str, Any]]:
        """Rows as dicts keyed by column name."""
        return [dict(zip(self.columns, row, strict=False)) for row in self.results]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "columns": self.columns,
            "types": self.types,
            "results": [list(row) for row in self.results],
            "has_more": self.has_more,
            "limit": self.limit,
            "offset": self.offset,
        }
