"""Unit tests for request validation models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from posthog_lookup.requests import (
    PersonEventsRequest,
    PersonsByEventRequest,
    PersonWithEventsRequest,
)


class TestPersonWithEventsRequest:
    def test_defaults(self) -> None:
        request = PersonWithEventsRequest(email="jane@example.com")
        assert request.to_kwargs() == {
            "email": "jane@example.com",
            "events_limit": 50,
            "event_type": None,
            "from_date": None,
            "to_date": None,
        }

    def test_strips_whitespace(self) -> None:
        assert PersonWithEventsRequest(email="  a@b.co ").email == "a@b.co"

    @pytest.mark.parametrize("email", ["", "   "])
    def test_blank_email_rejected(self, email: str) -> None:
        with pytest.raises(ValidationError):
            PersonWithEventsRequest(email=email)

    @pytest.mark.parametrize("limit", [0, -5])
    def test_limit_must_be_positive(self, limit: int) -> None:
        with pytest.raises(ValidationError):
            PersonWithEventsRequest(email="a@b.co", events_limit=limit)

    def test_blank_optional_values_become_none(self) -> None:
        request = PersonWithEventsRequest(
            email="a@b.co", event_type=" ", from_date="", to_date="  "
        )
        assert request.event_type is None
        assert request.from_date is None
        assert request.to_date is None

    def test_invalid_date_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Invalid date"):
            PersonWithEventsRequest(email="a@b.co", from_date="last tuesday")

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PersonWithEventsRequest(email="a@b.co", limit=5)  # type: ignore[call-arg]


class TestPersonsByEventRequest:
    def test_valid(self) -> None:
        request = PersonsByEventRequest(
            event_name="signup", limit=25, from_date="7d", to_date="2024-01-31"
        )
        assert request.to_kwargs() == {
            "event_name": "signup",
            "limit": 25,
            "from_date": "7d",
            "to_date": "2024-01-31",
        }

    def test_default_limit(self) -> None:
        assert PersonsByEventRequest(event_name="signup").limit == 10

    def test_blank_event_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PersonsByEventRequest(event_name="")


class TestPersonEventsRequest:
    def test_default_limit(self) -> None:
        request = PersonEventsRequest(person_id="p1")
        assert request.limit == 50
        assert request.event_type is None

    def test_frozen(self) -> None:
        request = PersonEventsRequest(person_id="p1")
        with pytest.raises(ValidationError):
            request.limit = 5  # type: ignore[misc]
