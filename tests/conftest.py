"""Shared fixtures for posthog_lookup tests."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from hypothesis import Phase, Verbosity, settings
from pydantic import SecretStr

from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.config import Credentials

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.normal,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
    derandomize=True,  # Reproducible in CI
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

# Load profile from HYPOTHESIS_PROFILE env var, default to "default"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


Handler = Callable[[httpx.Request], httpx.Response]


def query_text(request: httpx.Request) -> str:
    """Return the HogQL text sent in a query request."""
    body: dict[str, Any] = json.loads(request.content)
    return str(body["query"]["query"])


def hogql_response(
    columns: list[str], rows: list[list[Any]], **extra: Any
) -> httpx.Response:
    """Build a successful query endpoint response."""
    return httpx.Response(
        200, json={"columns": columns, "results": rows, "hasMore": False, **extra}
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def mock_credentials() -> Credentials:
    """Create mock credentials for API client testing."""
    return Credentials(
        api_key=SecretStr("phx_test_key"),
        project_id="12345",
        region="us",
    )


@pytest.fixture
def mock_client_factory(
    mock_credentials: Credentials,
) -> Callable[[Handler], PostHogClient]:
    """Factory for creating clients backed by httpx.MockTransport.

    Usage:
        async def test_something(mock_client_factory):
            def handler(request):
                return hogql_response(["id", "properties"], [])

            async with mock_client_factory(handler) as client:
                person = await client.get_person_by_email("a@example.com")
    """

    def factory(handler: Handler) -> PostHogClient:
        return PostHogClient(mock_credentials, _transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def person_and_events_handler() -> Handler:
    """Handler that answers person lookups and event lookups."""

    def handler(request: httpx.Request) -> httpx.Response:
        query = query_text(request)
        if "FROM persons" in query:
            return hogql_response(
                ["id", "properties"],
                [["person-1", json.dumps({"email": "jane@example.com", "plan": "pro"})]],
            )
        if "person_id =" in query:
            return hogql_response(
                ["event", "timestamp", "properties"],
                [
                    [
                        "$pageview",
                        "2024-03-02T10:00:00Z",
                        json.dumps({"$current_url": "/pricing", "$browser": "Firefox"}),
                    ],
                    ["signup", "2024-03-01T09:00:00Z", "{}"],
                ],
            )
        return hogql_response(
            ["id", "properties"],
            [
                ["person-1", json.dumps({"email": "jane@example.com"})],
                ["person-2", "{}"],
            ],
        )

    return handler
