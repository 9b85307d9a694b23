"""Validated request models for the lookup operations.

Front ends turn untyped input (CLI options, tool-call arguments) into one of
these frozen models before calling the client. Construction either yields a
fully typed request or raises ``pydantic.ValidationError`` describing every
problem; nothing partially validated reaches the client.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from posthog_lookup._internal.hogql import (
    DEFAULT_EVENTS_LIMIT,
    DEFAULT_PERSONS_LIMIT,
    is_valid_date_expression,
)

NonBlankStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(ge=1)]


class _LookupRequest(BaseModel):
    """Shared validation for lookup requests."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    from_date: str | None = None
    """Lower bound: date, ISO date-time or relative offset (24h, 7d, 2w, 3m)."""

    to_date: str | None = None
    """Upper bound: date, ISO date-time or relative offset."""

    @field_validator("from_date", "to_date", mode="after")
    @classmethod
    def validate_date_expression(cls, v: str | None) -> str | None:
        """Reject date bounds the resolver cannot parse; blank means unset."""
        if v is None or v == "":
            return None
        if not is_valid_date_expression(v):
            raise ValueError(
                f"Invalid date {v!r}. Use a date (2024-01-01, 2024/01/01), an "
                "ISO date-time or a relative offset (24h, 7d, 2w, 3m)."
            )
        return v

    def to_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the matching PostHogClient method."""
        return self.model_dump()


class PersonWithEventsRequest(_LookupRequest):
    """Look up a person by email together with their events."""

    email: NonBlankStr
    events_limit: PositiveInt = DEFAULT_EVENTS_LIMIT
    event_type: str | None = None

    @field_validator("event_type", mode="after")
    @classmethod
    def blank_event_type_is_unset(cls, v: str | None) -> str | None:
        return v or None


class PersonsByEventRequest(_LookupRequest):
    """Find persons who triggered an event."""

    event_name: NonBlankStr
    limit: PositiveInt = DEFAULT_PERSONS_LIMIT


class PersonEventsRequest(_LookupRequest):
    """Get events for a person id."""

    person_id: NonBlankStr
    limit: PositiveInt = DEFAULT_EVENTS_LIMIT
    event_type: str | None = None

    @field_validator("event_type", mode="after")
    @classmethod
    def blank_event_type_is_unset(cls, v: str | None) -> str | None:
        return v or None
