"""Timestamp helpers for cache records and HTTP headers."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any


def utc_timestamp() -> str:
    """Generate a UTC timestamp with second precision.

    Returns:
        Timestamp string in format: 2025-11-18T20:23:07Z
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # Naive values are read as UTC so they can be compared with aware ones
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_iso_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp as stored in the cache file.

    Args:
        value: Raw value of the timestamp field (may be any JSON type)

    Returns:
        Timezone-aware datetime, or None if the value is absent or invalid
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return _as_aware(parsed)


def parse_http_date(value: str | None) -> datetime | None:
    """
    Parse an RFC 7231 HTTP date such as a Last-Modified header.

    Args:
        value: Header value, e.g. "Tue, 18 Nov 2025 07:07:01 GMT"

    Returns:
        Timezone-aware datetime, or None if the header is absent or invalid
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if parsed is None:
        return None
    return _as_aware(parsed)


def is_not_after(earlier: datetime | None, later: datetime | None) -> bool:
    """
    Return True only if both instants are valid and ``earlier <= later``.

    Any missing value yields False, so an invalid date can never make a
    cache look fresh.
    """
    if earlier is None or later is None:
        return False
    try:
        return _as_aware(earlier) <= _as_aware(later)
    except TypeError:
        return False
