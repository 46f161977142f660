"""Datetime helpers: Drive timestamps in, ISO 8601 out."""

from __future__ import annotations

from datetime import datetime, timezone

import pendulum


def parse_datetime(value: str | datetime, default_tz: str = "UTC") -> datetime:
    """Parse an RFC 3339 or lax datetime string into a timezone-aware datetime.

    Accepts the ``modifiedTime`` format returned by Drive
    (``2026-02-02T22:21:29.975Z``) as well as looser variants such as
    ``2026-02-02 22:21`` or a bare date.

    Missing timezone defaults to default_tz.
    Missing time components default to zeros.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            tz = pendulum.timezone(default_tz)
            value = value.replace(tzinfo=tz)  # type: ignore[arg-type]
        return value

    parsed = pendulum.parse(value.strip(), tz=default_tz, strict=False)
    if not isinstance(parsed, pendulum.DateTime):
        # pendulum.parse returns Date for date-only strings
        parsed = pendulum.datetime(
            parsed.year, parsed.month, parsed.day, tz=default_tz  # type: ignore[union-attr]
        )
    return parsed  # type: ignore[return-value]


def parse_optional_datetime(value: str | None) -> datetime | None:
    """Parse a datetime, mapping empty or unparseable values to None."""
    if not value:
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        return None


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def format_iso(dt: datetime | None) -> str | None:
    """Format datetime as ISO 8601 for JSON serialization.

    SQLite drops tzinfo on the way back, so naive values are taken as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()
