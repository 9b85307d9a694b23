"""Tests for the lookup tools through an in-memory MCP client."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastmcp import Client

from tests.conftest import Handler, hogql_response, query_text

ClientFactory = Callable[[Handler], Client]


def result_data(result: Any) -> dict[str, Any]:
    """Decode a successful tool result."""
    if result.structured_content is not None:
        return dict(result.structured_content)
    return json.loads(result.content[0].text)


def error_text(result: Any) -> str:
    assert result.is_error
    return "\n".join(getattr(block, "text", "") for block in result.content)


class RecordingHandler:
    def __init__(self, response: httpx.Response) -> None:
        self.queries: list[str] = []
        self._response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.queries.append(query_text(request))
        return self._response


@pytest.mark.asyncio
async def test_tools_registered(mcp_client_factory: ClientFactory) -> None:
    async with mcp_client_factory(RecordingHandler(hogql_response([], []))) as client:
        tools = await client.list_tools()

    assert {tool.name for tool in tools} == {
        "lookup_person_by_email",
        "lookup_persons_by_event",
        "get_person_events",
    }


@pytest.mark.asyncio
async def test_tool_parameters_are_snake_case(
    mcp_client_factory: ClientFactory,
) -> None:
    async with mcp_client_factory(RecordingHandler(hogql_response([], []))) as client:
        tools = {tool.name: tool for tool in await client.list_tools()}

    def params(name: str) -> set[str]:
        return set(tools[name].inputSchema["properties"])

    assert params("lookup_person_by_email") == {
        "email",
        "events_limit",
        "event_type",
        "from_date",
        "to_date",
    }
    assert params("lookup_persons_by_event") == {
        "event_name",
        "limit",
        "from_date",
        "to_date",
    }
    assert params("get_person_events") == {
        "person_id",
        "limit",
        "event_type",
        "from_date",
        "to_date",
    }
    assert tools["lookup_persons_by_event"].inputSchema["required"] == ["event_name"]


class TestLookupPersonByEmail:
    @pytest.mark.asyncio
    async def test_found(
        self, mcp_client_factory: ClientFactory, person_and_events_handler: Handler
    ) -> None:
        async with mcp_client_factory(person_and_events_handler) as client:
            result = await client.call_tool(
                "lookup_person_by_email",
                {"email": "jane@example.com", "events_limit": 10},
                raise_on_error=False,
            )

        assert not result.is_error
        data = result_data(result)
        assert data["found"] is True
        assert data["person"]["id"] == "person-1"
        assert data["person"]["distinct_ids"] == []
        assert data["count"] == 2
        assert data["events"][0]["event"] == "$pageview"

    @pytest.mark.asyncio
    async def test_not_found(self, mcp_client_factory: ClientFactory) -> None:
        handler = RecordingHandler(hogql_response(["id", "properties"], []))

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "lookup_person_by_email",
                {"email": "nobody@example.com"},
                raise_on_error=False,
            )

        assert not result.is_error
        assert result_data(result) == {
            "found": False,
            "message": "No person found with email: nobody@example.com",
        }
        assert len(handler.queries) == 1

    @pytest.mark.asyncio
    async def test_blank_email_is_tool_error(
        self, mcp_client_factory: ClientFactory
    ) -> None:
        handler = RecordingHandler(hogql_response(["id", "properties"], []))

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "lookup_person_by_email", {"email": "   "}, raise_on_error=False
            )

        text = error_text(result)
        assert "Invalid arguments." in text
        assert "INVALID_ARGUMENTS" in text
        assert handler.queries == []

    @pytest.mark.asyncio
    async def test_invalid_date_is_tool_error(
        self, mcp_client_factory: ClientFactory
    ) -> None:
        handler = RecordingHandler(hogql_response(["id", "properties"], []))

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "lookup_person_by_email",
                {"email": "a@example.com", "from_date": "the other day"},
                raise_on_error=False,
            )

        assert "Invalid date" in error_text(result)
        assert handler.queries == []


class TestLookupPersonsByEvent:
    @pytest.mark.asyncio
    async def test_persons(
        self, mcp_client_factory: ClientFactory, person_and_events_handler: Handler
    ) -> None:
        async with mcp_client_factory(person_and_events_handler) as client:
            result = await client.call_tool(
                "lookup_persons_by_event", {"event_name": "signup"}, raise_on_error=False
            )

        data = result_data(result)
        assert data["count"] == 2
        assert [p["id"] for p in data["persons"]] == ["person-1", "person-2"]

    @pytest.mark.asyncio
    async def test_arguments_reach_query(self, mcp_client_factory: ClientFactory) -> None:
        handler = RecordingHandler(hogql_response(["id", "properties"], []))

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "lookup_persons_by_event",
                {"event_name": "signup", "limit": 3, "from_date": "2024-01-01"},
                raise_on_error=False,
            )

        assert result_data(result) == {"persons": [], "count": 0}
        assert "timestamp >= '2024-01-01 00:00:00.000'" in handler.queries[0]
        assert handler.queries[0].endswith("LIMIT 3")

    @pytest.mark.asyncio
    async def test_zero_limit_is_tool_error(
        self, mcp_client_factory: ClientFactory
    ) -> None:
        handler = RecordingHandler(hogql_response(["id", "properties"], []))

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "lookup_persons_by_event",
                {"event_name": "signup", "limit": 0},
                raise_on_error=False,
            )

        assert result.is_error
        assert handler.queries == []


class TestGetPersonEvents:
    @pytest.mark.asyncio
    async def test_events(self, mcp_client_factory: ClientFactory) -> None:
        handler = RecordingHandler(
            hogql_response(
                ["event", "timestamp", "properties"],
                [["signup", "2024-01-01T00:00:00Z", '{"plan": "pro"}']],
            )
        )

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "get_person_events",
                {"person_id": "person-1", "event_type": "signup"},
                raise_on_error=False,
            )

        data = result_data(result)
        assert data["count"] == 1
        assert data["events"][0]["properties"] == {"plan": "pro"}
        assert "AND event = 'signup'" in handler.queries[0]
        assert "timestamp >= '" in handler.queries[0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "summary"),
        [
            (401, "Authentication failed."),
            (429, "Rate limited by PostHog API."),
            (400, "Query error (HTTP 400)."),
            (502, "PostHog server error (HTTP 502)."),
        ],
    )
    async def test_api_errors_become_tool_errors(
        self, mcp_client_factory: ClientFactory, status: int, summary: str
    ) -> None:
        handler = RecordingHandler(httpx.Response(status, text="upstream says no"))

        async with mcp_client_factory(handler) as client:
            result = await client.call_tool(
                "get_person_events", {"person_id": "person-1"}, raise_on_error=False
            )

        text = error_text(result)
        assert summary in text
        assert "upstream says no" in text
