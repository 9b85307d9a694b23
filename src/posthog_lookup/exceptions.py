"""Exception hierarchy for posthog_lookup.

All library exceptions inherit from PostHogLookupError, enabling callers to
catch all library errors with a single except clause while still allowing
fine-grained handling when needed.

API errors carry the HTTP status code, the raw response body text and the
request that produced them, so front ends (and AI agents reading tool
errors) can see exactly what was sent and what came back.

A lookup that matches nothing is not an error: the client returns None or an
empty list instead.
"""

from __future__ import annotations

from typing import Any


class PostHogLookupError(Exception):
    """Base exception for all posthog_lookup errors.

    All library exceptions inherit from this class, allowing callers to:
    - Catch all library errors: except PostHogLookupError
    - Handle specific errors: except AuthenticationError
    - Serialize errors: error.to_dict()
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code for programmatic handling.
            details: Additional structured data about the error.
        """
        super().__init__(message)
        self._message = message
        self._code = code
        self._details = details or {}

    @property
    def code(self) -> str:
        """Machine-readable error code."""
        return self._code

    @property
    def message(self) -> str:
        """Human-readable error message."""
        return self._message

    @property
    def details(self) -> dict[str, Any]:
        """Additional structured error data."""
        return self._details

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/JSON output.

        Returns:
            Dictionary with keys: code, message, details.
        """
        return {
            "code": self._code,
            "message": self._message,
            "details": self._details,
        }

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self._message

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return (
            f"{self.__class__.__name__}(message={self._message!r}, code={self._code!r})"
        )


# Configuration Exceptions


class ConfigError(PostHogLookupError):
    """Configuration is missing or invalid.

    Raised when the API key or project id is not set, or the region is not
    one of the supported values. Both front ends treat this as fatal at
    startup.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Human-readable error message.
            details: Additional structured data.
        """
        super().__init__(message, code="CONFIG_ERROR", details=details)


# Input Exceptions


class DateParseError(PostHogLookupError, ValueError):
    """A date expression could not be parsed.

    Accepted forms are relative offsets (``7d``, ``24h``, ``2w``, ``3m``)
    ISO-8601 dates or date-times, and ``YYYY/MM/DD`` dates with an optional
    time. Raised before any request is sent.
    """

    def __init__(self, expression: str) -> None:
        """Initialize DateParseError.

        Args:
            expression: The date expression that failed to parse.
        """
        self._expression = expression
        message = (
            f"Invalid date: {expression!r}. Use a date (2024-01-01 or "
            "2024/01/01), an ISO date-time (2024-01-01T12:00:00) or a "
            "relative offset (24h, 7d, 2w, 3m)."
        )
        super().__init__(
            message, code="INVALID_DATE", details={"expression": expression}
        )

    @property
    def expression(self) -> str:
        """The date expression that failed to parse."""
        return self._expression


# API Exceptions


class APIError(PostHogLookupError):
    """Base class for PostHog API HTTP errors.

    Carries the HTTP status code and the raw response body text, plus the
    request that produced them.

    Example:
        ```python
        try:
            person = await client.get_person_by_email("a@example.com")
        except APIError as e:
            print(f"Status: {e.status_code}")
            print(f"Response: {e.response_body}")
            print(f"Request URL: {e.request_url}")
        ```
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        response_body: str | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_body: dict[str, Any] | None = None,
        code: str = "API_ERROR",
    ) -> None:
        """Initialize APIError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from response.
            response_body: Raw response body text.
            request_method: HTTP method used.
            request_url: Full request URL.
            request_body: JSON request body sent.
            code: Machine-readable error code.
        """
        self._status_code = status_code
        self._response_body = response_body
        self._request_method = request_method
        self._request_url = request_url
        self._request_body = request_body

        details: dict[str, Any] = {
            "status_code": status_code,
        }
        if response_body is not None:
            details["response_body"] = response_body
        if request_method is not None:
            details["request_method"] = request_method
        if request_url is not None:
            details["request_url"] = request_url
        if request_body is not None:
            details["request_body"] = request_body

        super().__init__(message, code=code, details=details)

    @property
    def status_code(self) -> int:
        """HTTP status code from response."""
        return self._status_code

    @property
    def response_body(self) -> str | None:
        """Raw response body text."""
        return self._response_body

    @property
    def request_method(self) -> str | None:
        """HTTP method used."""
        return self._request_method

    @property
    def request_url(self) -> str | None:
        """Full request URL."""
        return self._request_url

    @property
    def request_body(self) -> dict[str, Any] | None:
        """JSON request body sent."""
        return self._request_body


class AuthenticationError(APIError):
    """Authentication with the PostHog API failed (HTTP 401/403).

    The personal API key is invalid, expired, or lacks the ``query:read``
    scope for the project.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        *,
        status_code: int = 401,
        response_body: str | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_body=request_body,
            code="AUTH_FAILED",
        )


class RateLimitError(APIError):
    """PostHog API rate limit exceeded (HTTP 429).

    Requests are never retried automatically. ``retry_after`` holds the
    Retry-After header value when the API sent one.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: int | None = None,
        status_code: int = 429,
        response_body: str | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_body: dict[str, Any] | None = None,
    ) -> None:
        self._retry_after = retry_after
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_body=request_body,
            code="RATE_LIMITED",
        )
        if retry_after is not None:
            self._details["retry_after"] = retry_after

    @property
    def retry_after(self) -> int | None:
        """Seconds until retry is allowed, or None if unknown."""
        return self._retry_after


class QueryError(APIError):
    """Query rejected by the PostHog API (HTTP 4xx other than auth/rate limit).

    Usually a HogQL syntax or validation problem; the response body holds
    PostHog's explanation.
    """

    def __init__(
        self,
        message: str = "Query execution failed",
        *,
        status_code: int = 400,
        response_body: str | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_body=request_body,
            code="QUERY_FAILED",
        )


class ServerError(APIError):
    """PostHog server error (HTTP 5xx)."""

    def __init__(
        self,
        message: str = "Server error",
        *,
        status_code: int = 500,
        response_body: str | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_body=request_body,
            code="SERVER_ERROR",
        )
