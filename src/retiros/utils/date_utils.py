"""
Date utilities for reading and writing stored timestamps.

Rows written by different versions of the ledger carry timestamps in one of
three textual encodings. Reads accept all of them; writes always emit
RFC 3339 with an explicit UTC offset.
"""

from datetime import datetime, timezone
from typing import Optional

from retiros.core.exceptions import DateFormatError, InputValidationError

NAIVE_FORMAT = "%Y-%m-%d %H:%M:%S"
NAIVE_FRACTIONAL_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
DATE_ONLY_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_rfc3339(value: datetime) -> str:
    """
    Serialize a datetime for storage.

    Args:
        value: Datetime to serialize (naive values are treated as UTC)

    Returns:
        RFC 3339 string such as "2024-03-01T09:30:00+00:00"
    """
    return ensure_utc(value).isoformat()


def _parse_with_offset(text: str) -> Optional[datetime]:
    candidate = text
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    # fromisoformat also accepts naive strings; those belong to later attempts
    if parsed.tzinfo is None:
        return None
    return parsed.astimezone(timezone.utc)


def _parse_naive(text: str, fmt: str) -> Optional[datetime]:
    try:
        parsed = datetime.strptime(text, fmt)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def parse_flexible_datetime(text: str) -> datetime:
    """
    Parse a stored timestamp in any of the known encodings.

    Attempts, first match wins:
    1. RFC 3339 with offset ("2024-03-01T09:30:00+02:00", "...Z")
    2. "YYYY-MM-DD HH:MM:SS" interpreted as UTC
    3. "YYYY-MM-DD HH:MM:SS.ffffff" interpreted as UTC

    Args:
        text: Timestamp as read from the database

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        DateFormatError: If the text matches none of the formats
    """
    if not isinstance(text, str):
        raise DateFormatError(f"Expected timestamp text, got {type(text).__name__}")

    value = text.strip()

    parsed = _parse_with_offset(value)
    if parsed is not None:
        return parsed

    parsed = _parse_naive(value, NAIVE_FORMAT)
    if parsed is not None:
        return parsed

    parsed = _parse_naive(value, NAIVE_FRACTIONAL_FORMAT)
    if parsed is not None:
        return parsed

    raise DateFormatError(f"Unrecognized timestamp format: {text!r}")


def parse_user_datetime(text: str) -> datetime:
    """
    Parse a date typed by a user on the command line.

    Accepts "YYYY-MM-DD HH:MM:SS" or "YYYY-MM-DD" (midnight), both as UTC.

    Raises:
        InputValidationError: If the text matches neither format
    """
    value = text.strip()
    for fmt in (NAIVE_FORMAT, DATE_ONLY_FORMAT):
        parsed = _parse_naive(value, fmt)
        if parsed is not None:
            return parsed

    raise InputValidationError(
        f"Invalid date format: {text}. Use YYYY-MM-DD or YYYY-MM-DD HH:MM:SS"
    )
