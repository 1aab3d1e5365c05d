"""Canonical date strings (YYYY-MM-DD) used for all indexing and comparison."""
import re
from datetime import date, datetime
from typing import Union

DateLike = Union[str, date, datetime]

# Date part of a canonical string or an ISO-8601 timestamp
_ISO_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:$|[T ])")


def normalize_date(value: DateLike) -> str:
    """
    Normalize a date-like value to canonical ``YYYY-MM-DD`` form.

    Timestamps keep the calendar date they were written with; no timezone
    conversion is applied, so "2025-01-15T23:30:00-05:00" stays 2025-01-15.

    Raises:
        ValueError: if the value is not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    message = f"Invalid date: {value!r} (expected YYYY-MM-DD or ISO-8601)"
    if isinstance(value, str):
        match = _ISO_PREFIX.match(value.strip())
        if match:
            # Rejects impossible dates such as 2025-02-30
            try:
                return date.fromisoformat(match.group(1)).isoformat()
            except ValueError as e:
                raise ValueError(message) from e
    raise ValueError(message)


def parse_date(value: DateLike) -> date:
    """Parse a date-like value into a ``datetime.date``."""
    return date.fromisoformat(normalize_date(value))


def is_valid_date_string(value: str) -> bool:
    """True if value is already in canonical YYYY-MM-DD form."""
    if not isinstance(value, str) or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
