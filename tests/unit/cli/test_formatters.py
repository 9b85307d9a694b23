"""Tests for CLI output formatters."""

from __future__ import annotations

import json

from posthog_lookup.cli.formatters import (
    format_event,
    format_events,
    format_json,
    format_person,
    format_persons_list,
    format_properties,
)
from posthog_lookup.cli.validators import parse_property_filter
from posthog_lookup.types import Event, Person


class TestFormatJson:
    def test_round_trips(self) -> None:
        data = {"name": "café", "n": [1, 2]}
        output = format_json(data)
        assert json.loads(output) == data
        assert "café" in output


class TestFormatProperties:
    def test_all_keys(self) -> None:
        text = format_properties({"email": "a@example.com", "age": 30})
        assert text.plain == '  email: "a@example.com"\n  age: 30'

    def test_filter_keeps_order_and_skips_missing(self) -> None:
        text = format_properties({"a": 1, "b": 2, "c": 3}, ["c", "zzz", "a"])
        assert text.plain == "  c: 3\n  a: 1"

    def test_markup_not_interpreted(self) -> None:
        text = format_properties({"name": "[bold]x[/bold]"})
        assert "[bold]x[/bold]" in text.plain


class TestFormatEvent:
    def test_preview_limited_to_three_properties(self) -> None:
        event = Event(
            event="$pageview",
            timestamp="2024-01-01T00:00:00Z",
            properties={"a": 1, "b": "two", "c": True, "d": None},
        )
        assert format_event(event).plain == (
            '  2024-01-01T00:00:00Z $pageview a=1, b="two", c=true'
        )

    def test_empty_events(self) -> None:
        assert format_events([]).plain == "\nNo events found."

    def test_events_header(self) -> None:
        events = [Event(event="signup", timestamp="t1"), Event(event="login", timestamp="t2")]
        lines = format_events(events).plain.splitlines()
        assert lines[1] == "Events (2):"
        assert len(lines) == 4


class TestFormatPerson:
    def test_distinct_ids(self) -> None:
        person = Person(id="p1", distinct_ids=["d1", "d2"], properties={"x": 1})
        plain = format_person(person).plain
        assert "ID: p1" in plain
        assert "Distinct IDs: d1, d2" in plain
        assert "  x: 1" in plain

    def test_no_distinct_ids(self) -> None:
        assert "Distinct IDs: N/A" in format_person(Person(id="p1")).plain


class TestFormatPersonsList:
    def test_labels_by_email_or_id(self) -> None:
        persons = [Person(id="p1", properties={"email": "a@example.com"}), Person(id="p2")]
        plain = format_persons_list(persons, show_properties=False).plain
        assert "1. a@example.com" in plain
        assert "2. p2" in plain

    def test_empty(self) -> None:
        assert (
            format_persons_list([], show_properties=True).plain
            == "\nNo persons found for this event."
        )


class TestParsePropertyFilter:
    def test_splits_and_strips(self) -> None:
        assert parse_property_filter(" email, name ,,plan") == ["email", "name", "plan"]

    def test_none(self) -> None:
        assert parse_property_filter(None) is None
