"""
posthog_lookup - look up PostHog persons and their events.

Builds escaped HogQL queries, runs them against PostHog's query API and maps
the tabular results to Person and Event records. Used by the
``posthog-lookup`` CLI and the ``posthog-lookup-mcp`` server.
"""

from posthog_lookup._internal.api_client import PostHogClient
from posthog_lookup._internal.config import ConfigManager, Credentials
from posthog_lookup.exceptions import (
    APIError,
    AuthenticationError,
    ConfigError,
    DateParseError,
    PostHogLookupError,
    QueryError,
    RateLimitError,
    ServerError,
)
from posthog_lookup.requests import (
    PersonEventsRequest,
    PersonsByEventRequest,
    PersonWithEventsRequest,
)
from posthog_lookup.types import (
    Event,
    Person,
    PersonWithEvents,
    QueryResult,
    TimeframeOptions,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "PostHogClient",
    "ConfigManager",
    "Credentials",
    # Exceptions
    "PostHogLookupError",
    "ConfigError",
    "DateParseError",
    "APIError",
    "AuthenticationError",
    "RateLimitError",
    "QueryError",
    "ServerError",
    # Requests
    "PersonWithEventsRequest",
    "PersonsByEventRequest",
    "PersonEventsRequest",
    # Result types
    "Person",
    "Event",
    "PersonWithEvents",
    "QueryResult",
    "TimeframeOptions",
]
