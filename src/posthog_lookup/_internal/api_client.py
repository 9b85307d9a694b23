"""PostHog API Client.

Async HTTP client for PostHog's HogQL query endpoint. Handles:
- Personal API key authentication via Bearer header
- Regional endpoint routing (US, EU)
- Mapping error responses to typed exceptions
- Person and event lookups built on HogQL queries

Requests are never retried. Each public lookup issues one request, except
get_person_with_events, which issues at most two, strictly in sequence.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from posthog_lookup._internal.config import Credentials
from posthog_lookup._internal.hogql import (
    DEFAULT_EVENTS_LIMIT,
    DEFAULT_PERSONS_LIMIT,
    build_person_by_email_query,
    build_person_events_query,
    build_persons_by_event_query,
)
from posthog_lookup._internal.transforms import (
    transform_event_row,
    transform_person_row,
)
from posthog_lookup.exceptions import (
    APIError,
    AuthenticationError,
    PostHogLookupError,
    QueryError,
    RateLimitError,
    ServerError,
)
from posthog_lookup.types import (
    Event,
    Person,
    PersonWithEvents,
    QueryResult,
    TimeframeOptions,
)

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

QUERY_KIND = "HogQLQuery"


def _resolve_limit(limit: int | None, default: int, name: str = "limit") -> int:
    """Return ``default`` for None, otherwise validate a positive integer."""
    if limit is None:
        return default
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValueError(f"{name} must be an integer. Got: {limit!r}")
    if limit < 1:
        raise ValueError(f"{name} must be at least 1. Got: {limit}")
    return limit


class PostHogClient:
    """Async HTTP client for PostHog person and event lookups.

    Holds only immutable credentials and a lazily created connection pool,
    so several lookups may run concurrently against one instance.

    Example:
        ```python
        from posthog_lookup._internal.config import ConfigManager
        from posthog_lookup._internal.api_client import PostHogClient

        credentials = ConfigManager().resolve_credentials()

        async with PostHogClient(credentials) as client:
            result = await client.get_person_with_events("a@example.com")
        ```
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        timeout: float = 30.0,
        _transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            credentials: Immutable authentication credentials.
            timeout: Request timeout in seconds.
            _transport: Internal parameter for testing with MockTransport.
        """
        self._credentials = credentials
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._transport = _transport

    @property
    def credentials(self) -> Credentials:
        """The credentials this client authenticates with."""
        return self._credentials

    def _get_auth_header(self) -> str:
        """Return the Authorization header value."""
        return f"Bearer {self._credentials.api_key.get_secret_value()}"

    def _build_query_url(self) -> str:
        """Return the HogQL query endpoint URL for the configured project."""
        base = self._credentials.api_base_url
        return f"{base}/api/projects/{self._credentials.project_id}/query/"

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized.

        Returns:
            The httpx.AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> PostHogClient:
        """Enter async context manager."""
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager, closing client."""
        await self.aclose()

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> int | None:
        """Parse the Retry-After header as whole seconds, if present."""
        value = response.headers.get("Retry-After")
        if value is not None and value.strip().isdigit():
            return int(value.strip())
        return None

    def _handle_response(
        self,
        response: httpx.Response,
        *,
        request_method: str,
        request_url: str,
        request_body: dict[str, Any],
    ) -> dict[str, Any]:
        """Handle API response, raising typed exceptions on failure.

        Status code handling:
            - 200-299: Parse and return the JSON object
            - 401, 403: AuthenticationError
            - 429: RateLimitError
            - 5xx: ServerError
            - other: QueryError

        Every error carries the status code and the raw body text.

        Args:
            response: The HTTP response to handle.
            request_method: HTTP method used.
            request_url: Full request URL.
            request_body: JSON request body sent.

        Returns:
            Decoded JSON object for successful requests.

        Raises:
            AuthenticationError: On 401/403 response.
            RateLimitError: On 429 response.
            ServerError: On 5xx response.
            QueryError: On any other non-2xx response.
            PostHogLookupError: If a successful response is not a JSON object.
        """
        status = response.status_code
        if not response.is_success:
            body_text = response.text
            message = f"PostHog API error ({status}): {body_text}"
            context: dict[str, Any] = {
                "status_code": status,
                "response_body": body_text,
                "request_method": request_method,
                "request_url": request_url,
                "request_body": request_body,
            }
            error: APIError
            if status in (401, 403):
                error = AuthenticationError(message, **context)
            elif status == 429:
                error = RateLimitError(
                    message, retry_after=self._parse_retry_after(response), **context
                )
            elif status >= 500:
                error = ServerError(message, **context)
            else:
                error = QueryError(message, **context)
            logger.debug("PostHog API error %d for %s", status, request_url)
            raise error

        try:
            payload = response.json()
        except json.JSONDecodeError as e:
            raise PostHogLookupError(
                f"PostHog API returned invalid JSON: {e}",
                code="INVALID_RESPONSE",
                details={
                    "status_code": status,
                    "response_body": response.text[:500],
                    "request_url": request_url,
                },
            ) from e

        if not isinstance(payload, dict):
            raise PostHogLookupError(
                "PostHog API returned an unexpected response shape",
                code="INVALID_RESPONSE",
                details={"status_code": status, "request_url": request_url},
            )
        return payload

    async def execute_query(self, query: str) -> QueryResult:
        """Run a HogQL query and return the tabular result.

        Args:
            query: HogQL statement. Interpolated values must already be
                escaped.

        Returns:
            Typed QueryResult envelope.

        Raises:
            AuthenticationError: Invalid API key (401/403).
            RateLimitError: Rate limit exceeded (429).
            QueryError: Query rejected (other 4xx).
            ServerError: Server-side errors (5xx).
            PostHogLookupError: Network/connection errors.
        """
        client = self._ensure_client()
        url = self._build_query_url()
        body: dict[str, Any] = {"query": {"kind": QUERY_KIND, "query": query}}

        logger.debug("HogQL query: %s", query)

        try:
            response = await client.post(
                url,
                json=body,
                headers={
                    "Authorization": self._get_auth_header(),
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise PostHogLookupError(
                f"HTTP error: {e}",
                code="HTTP_ERROR",
                details={
                    "error": str(e),
                    "request_method": "POST",
                    "request_url": url,
                },
            ) from e

        payload = self._handle_response(
            response,
            request_method="POST",
            request_url=url,
            request_body=body,
        )
        result = QueryResult.from_response(payload)
        logger.debug(
            "HogQL response: %d rows %s",
            len(result.results),
            json.dumps(result.to_dicts(), default=str),
        )
        return result

    async def get_person_by_email(self, email: str) -> Person | None:
        """Look up a single person by their ``email`` property.

        Args:
            email: Email address to match exactly.

        Returns:
            The matching Person, or None when no person has that email.
        """
        result = await self.execute_query(build_person_by_email_query(email))
        if not result.results:
            return None
        return transform_person_row(result.results[0])

    async def get_persons_by_event(
        self,
        event_name: str,
        *,
        limit: int | None = DEFAULT_PERSONS_LIMIT,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> list[Person]:
        """Find persons who triggered an event, most recent first.

        Args:
            event_name: Event name to match exactly.
            limit: Maximum persons to return (default 10).
            from_date: Optional lower bound (ISO or relative).
            to_date: Optional upper bound (ISO or relative).

        Returns:
            Persons ordered by descending event timestamp; may be empty.

        Raises:
            ValueError: If limit is not a positive integer.
            DateParseError: If a bound cannot be parsed.
        """
        resolved_limit = _resolve_limit(limit, DEFAULT_PERSONS_LIMIT)
        query = build_persons_by_event_query(
            event_name,
            limit=resolved_limit,
            timeframe=TimeframeOptions(from_date=from_date, to_date=to_date),
        )
        result = await self.execute_query(query)
        # Rows past LIMIT from an upstream that ignores it are dropped
        return [transform_person_row(row) for row in result.results[:resolved_limit]]

    async def get_person_events(
        self,
        person_id: str,
        *,
        limit: int | None = DEFAULT_EVENTS_LIMIT,
        event_type: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> list[Event]:
        """Get a person's events, most recent first.

        When ``from_date`` is not given, only the last 30 days are searched.

        Args:
            person_id: PostHog person id.
            limit: Maximum events to return (default 50).
            event_type: Only return events with this name.
            from_date: Optional lower bound (ISO or relative, default 30d).
            to_date: Optional upper bound (ISO or relative).

        Returns:
            Events ordered by descending timestamp; may be empty.

        Raises:
            ValueError: If limit is not a positive integer.
            DateParseError: If a bound cannot be parsed.
        """
        resolved_limit = _resolve_limit(limit, DEFAULT_EVENTS_LIMIT)
        query = build_person_events_query(
            person_id,
            limit=resolved_limit,
            event_type=event_type,
            timeframe=TimeframeOptions(from_date=from_date, to_date=to_date),
        )
        result = await self.execute_query(query)
        return [transform_event_row(row) for row in result.results[:resolved_limit]]

    async def get_person_with_events(
        self,
        email: str,
        *,
        events_limit: int | None = DEFAULT_EVENTS_LIMIT,
        event_type: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> PersonWithEvents | None:
        """Look up a person by email together with their recent events.

        The events request is only issued once the person is found.

        Args:
            email: Email address to match exactly.
            events_limit: Maximum events to return (default 50).
            event_type: Only return events with this name.
            from_date: Optional lower bound (ISO or relative, default 30d).
            to_date: Optional upper bound (ISO or relative).

        Returns:
            PersonWithEvents, or None when no person has that email.
        """
        resolved_limit = _resolve_limit(
            events_limit, DEFAULT_EVENTS_LIMIT, name="events_limit"
        )
        person = await self.get_person_by_email(email)
        if person is None:
            return None

        events = await self.get_person_events(
            person.id,
            limit=resolved_limit,
            event_type=event_type,
            from_date=from_date,
            to_date=to_date,
        )
        return PersonWithEvents(person=person, events=events)
