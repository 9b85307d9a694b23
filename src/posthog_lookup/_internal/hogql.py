"""HogQL query construction.

Builds the HogQL statements sent to PostHog's query endpoint:

- date expressions (absolute ISO or relative ``<n><unit>``) resolved to
  HogQL timestamp literals,
- timestamp clauses appended after a ``WHERE`` condition,
- string literals escaped before interpolation,
- the three lookup statements used by the client.

Everything here is pure string manipulation; nothing touches the network.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from posthog_lookup.exceptions import DateParseError
from posthog_lookup.types import TimeframeOptions

_RELATIVE_DATE_RE = re.compile(r"^(\d+)([hdwm])$")
_SLASHED_DATE_FORMATS = ("%Y/%m/%d", "%Y/%m/%d %H:%M", "%Y/%m/%d %H:%M:%S")

# Backslash first, so the backslashes added by later entries stay single.
_ESCAPE_SEQUENCE: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ("\0", "\\0"),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)

DEFAULT_EVENTS_WINDOW = "30d"
"""Lower bound applied to person event lookups when none is given."""

DEFAULT_PERSONS_LIMIT = 10
DEFAULT_EVENTS_LIMIT = 50


def escape_string(value: str) -> str:
    """Escape a value for use inside a single-quoted HogQL string literal.

    Backslashes are doubled; single quotes, NUL, newline, carriage return
    and tab become backslash escapes. ``o'brien`` becomes ``o\\'brien``.

    Args:
        value: Free-form user input (email, event name, person id, ...).

    Returns:
        The escaped value, without surrounding quotes.
    """
    for raw, escaped in _ESCAPE_SEQUENCE:
        value = value.replace(raw, escaped)
    return value


def quote_string(value: str) -> str:
    """Return ``value`` escaped and wrapped in single quotes."""
    return f"'{escape_string(value)}'"


def _subtract_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` back by calendar months, keeping the day of month.

    A day that does not exist in the target month rolls forward into the
    following month (March 31 minus one month is March 2 or 3), keeping the
    time of day.
    """
    total = moment.year * 12 + (moment.month - 1) - months
    year, month_index = divmod(total, 12)
    first_of_month = moment.replace(year=year, month=month_index + 1, day=1)
    return first_of_month + timedelta(days=moment.day - 1)


def _parse_slashed(text: str) -> datetime | None:
    for fmt in _SLASHED_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _parse_absolute(expression: str) -> datetime:
    """Parse an absolute date or date-time, normalized to aware UTC.

    Accepts ISO-8601 (``2024-01-15``, ``2024-01-15T10:00:00Z``) and the
    slash-separated ``2024/01/15`` with an optional ``HH:MM[:SS]`` time.
    Values without a zone are taken as UTC.
    """
    text = expression.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        parsed = _parse_slashed(text)
        if parsed is None:
            raise DateParseError(expression) from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def resolve_date(expression: str, *, now: datetime | None = None) -> datetime:
    """Resolve a date expression to an absolute UTC datetime.

    Relative expressions ``<n>h``, ``<n>d``, ``<n>w`` and ``<n>m`` mean
    "now minus n hours/days/weeks/calendar months". Anything else is parsed
    as an ISO-8601 date or date-time; naive values are taken as UTC.

    Args:
        expression: Date expression such as ``7d`` or ``2024-01-01``.
        now: Reference time for relative expressions. Defaults to the
            current UTC time.

    Returns:
        Timezone-aware UTC datetime.

    Raises:
        DateParseError: If the expression is neither relative nor ISO.

    Example:
        ```python
        resolve_date("7d")          # seven days ago
        resolve_date("2024-01-01")  # 2024-01-01 00:00:00+00:00
        ```
    """
    match = _RELATIVE_DATE_RE.match(expression.strip())
    if match is None:
        return _parse_absolute(expression)

    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    amount = int(match.group(1))
    unit = match.group(2)
    try:
        if unit == "h":
            return now - timedelta(hours=amount)
        if unit == "d":
            return now - timedelta(days=amount)
        if unit == "w":
            return now - timedelta(weeks=amount)
        return _subtract_months(now, amount)
    except (OverflowError, ValueError) as e:
        # Offsets reaching past year 1
        raise DateParseError(expression) from e


def is_valid_date_expression(expression: str) -> bool:
    """Return True if ``expression`` can be resolved by resolve_date."""
    try:
        resolve_date(expression)
    except DateParseError:
        return False
    return True


def format_hogql_timestamp(moment: datetime) -> str:
    """Format a datetime as a HogQL timestamp literal body.

    The result is ``YYYY-MM-DD HH:MM:SS.sss`` in UTC with no zone suffix.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    millis = moment.microsecond // 1000
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}.{millis:03d}"
    )


def build_timestamp_clause(
    timeframe: TimeframeOptions,
    *,
    now: datetime | None = None,
) -> str:
    """Build the timestamp filter appended after a WHERE condition.

    Args:
        timeframe: Optional lower and upper bounds.
        now: Reference time for relative bounds.

    Returns:
        ``" AND timestamp >= '...' AND timestamp <= '...'"`` with only the
        bounds that are set, or an empty string when neither is set.

    Raises:
        DateParseError: If a bound cannot be parsed.
    """
    clauses: list[str] = []

    if timeframe.from_date:
        lower = format_hogql_timestamp(resolve_date(timeframe.from_date, now=now))
        clauses.append(f"timestamp >= '{lower}'")

    if timeframe.to_date:
        upper = format_hogql_timestamp(resolve_date(timeframe.to_date, now=now))
        clauses.append(f"timestamp <= '{upper}'")

    if not clauses:
        return ""
    return " AND " + " AND ".join(clauses)


# =============================================================================
# Lookup Statements
# =============================================================================


def build_person_by_email_query(email: str) -> str:
    """Single-row person lookup on the ``email`` person property."""
    return (
        "SELECT id, properties\n"
        "FROM persons\n"
        f"WHERE properties.email = {quote_string(email)}\n"
        "LIMIT 1"
    )


def build_persons_by_event_query(
    event_name: str,
    *,
    limit: int = DEFAULT_PERSONS_LIMIT,
    timeframe: TimeframeOptions | None = None,
    now: datetime | None = None,
) -> str:
    """Distinct persons who triggered ``event_name``, most recent first."""
    timestamp_clause = build_timestamp_clause(timeframe or TimeframeOptions(), now=now)
    return (
        "SELECT DISTINCT person.id, person.properties\n"
        "FROM events\n"
        f"WHERE event = {quote_string(event_name)}{timestamp_clause}\n"
        "ORDER BY timestamp DESC\n"
        f"LIMIT {int(limit)}"
    )


def build_person_events_query(
    person_id: str,
    *,
    limit: int = DEFAULT_EVENTS_LIMIT,
    event_type: str | None = None,
    timeframe: TimeframeOptions | None = None,
    now: datetime | None = None,
) -> str:
    """Events for one person, most recent first.

    The lower bound defaults to the last 30 days when ``timeframe`` has no
    ``from_date``.
    """
    timeframe = timeframe or TimeframeOptions()
    if not timeframe.from_date:
        timeframe = TimeframeOptions(
            from_date=DEFAULT_EVENTS_WINDOW, to_date=timeframe.to_date
        )
    timestamp_clause = build_timestamp_clause(timeframe, now=now)
    event_type_clause = (
        f" AND event = {quote_string(event_type)}" if event_type else ""
    )
    return (
        "SELECT event, timestamp, properties\n"
        "FROM events\n"
        f"WHERE person_id = {quote_string(person_id)}"
        f"{event_type_clause}{timestamp_clause}\n"
        "ORDER BY timestamp DESC\n"
        f"LIMIT {int(limit)}"
    )
