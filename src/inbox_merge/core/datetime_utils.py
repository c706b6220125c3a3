"""Datetime helpers shared across the engine."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

__all__ = [
    "ensure_utc",
    "parse_header_date",
    "seconds_between",
    "mbox_timestamp",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` in UTC, treating naive values as already UTC."""
    if value is None:
        return None
    return _as_utc(value)


def parse_header_date(header_value: str | None) -> datetime | None:
    """Parse an RFC 2822 ``Date`` header, returning ``None`` when malformed."""
    if not header_value:
        return None
    try:
        return parsedate_to_datetime(header_value)
    except (TypeError, ValueError, IndexError):
        return None


def seconds_between(first: datetime, second: datetime) -> float:
    """Absolute number of seconds separating two possibly naive datetimes."""
    return abs((_as_utc(first) - _as_utc(second)).total_seconds())


def mbox_timestamp(value: datetime | None) -> str:
    """Format ``value`` the way mbox separator lines expect (asctime style)."""
    moment = ensure_utc(value) or _EPOCH
    return moment.strftime("%a %b %d %H:%M:%S %Y")
