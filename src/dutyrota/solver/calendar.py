"""
Calendar Utilities
==================
Weekend/holiday classification and date ranges over canonical date strings.

Holidays are a fixed table of US federal holidays (observed dates). A
holiday missing from the table is treated as an ordinary day.
"""
from datetime import timedelta
from typing import FrozenSet, Iterator

from dutyrota.models.dates import DateLike, normalize_date, parse_date

FEDERAL_HOLIDAYS_2024 = (
    "2024-01-01",  # New Year's Day
    "2024-01-15",  # MLK Day
    "2024-02-19",  # Presidents Day
    "2024-05-27",  # Memorial Day
    "2024-06-19",  # Juneteenth
    "2024-07-04",  # Independence Day
    "2024-09-02",  # Labor Day
    "2024-10-14",  # Columbus Day
    "2024-11-11",  # Veterans Day
    "2024-11-28",  # Thanksgiving
    "2024-12-25",  # Christmas
)

FEDERAL_HOLIDAYS_2025 = (
    "2025-01-01",
    "2025-01-20",
    "2025-02-17",
    "2025-05-26",
    "2025-06-19",
    "2025-07-04",
    "2025-09-01",
    "2025-10-13",
    "2025-11-11",
    "2025-11-27",
    "2025-12-25",
)

FEDERAL_HOLIDAYS_2026 = (
    "2026-01-01",
    "2026-01-19",
    "2026-02-16",
    "2026-05-25",
    "2026-06-19",
    "2026-07-03",  # Independence Day observed (Jul 4 is a Saturday)
    "2026-09-07",
    "2026-10-12",
    "2026-11-11",
    "2026-11-26",
    "2026-12-25",
)

FEDERAL_HOLIDAYS_2027 = (
    "2027-01-01",
    "2027-01-18",
    "2027-02-15",
    "2027-05-31",
    "2027-06-18",  # Juneteenth observed
    "2027-07-05",  # Independence Day observed
    "2027-09-06",
    "2027-10-11",
    "2027-11-11",
    "2027-11-25",
    "2027-12-24",  # Christmas observed
    "2027-12-31",  # New Year's Day 2028 observed
)

FEDERAL_HOLIDAYS_2028 = (
    "2028-01-17",
    "2028-02-21",
    "2028-05-29",
    "2028-06-19",
    "2028-07-04",
    "2028-09-04",
    "2028-10-09",
    "2028-11-10",  # Veterans Day observed
    "2028-11-23",
    "2028-12-25",
)

FEDERAL_HOLIDAYS_2029 = (
    "2029-01-01",
    "2029-01-15",
    "2029-02-19",
    "2029-05-28",
    "2029-06-19",
    "2029-07-04",
    "2029-09-03",
    "2029-10-08",
    "2029-11-12",  # Veterans Day observed
    "2029-11-22",
    "2029-12-25",
)

FEDERAL_HOLIDAYS_2030 = (
    "2030-01-01",
    "2030-01-21",
    "2030-02-18",
    "2030-05-27",
    "2030-06-19",
    "2030-07-04",
    "2030-09-02",
    "2030-10-14",
    "2030-11-11",
    "2030-11-28",
    "2030-12-25",
)

HOLIDAYS: FrozenSet[str] = frozenset(
    FEDERAL_HOLIDAYS_2024
    + FEDERAL_HOLIDAYS_2025
    + FEDERAL_HOLIDAYS_2026
    + FEDERAL_HOLIDAYS_2027
    + FEDERAL_HOLIDAYS_2028
    + FEDERAL_HOLIDAYS_2029
    + FEDERAL_HOLIDAYS_2030
)

WEEKDAY = "weekday"
WEEKEND = "weekend"
HOLIDAY = "holiday"


def is_weekend(day: DateLike) -> bool:
    """True on Saturday and Sunday."""
    return parse_date(day).weekday() >= 5


def is_holiday(day: DateLike) -> bool:
    """True if the date is in the fixed holiday table."""
    return normalize_date(day) in HOLIDAYS


def day_type(day: DateLike) -> str:
    """Classify a date as "holiday", "weekend" or "weekday" (holiday wins)."""
    if is_holiday(day):
        return HOLIDAY
    if is_weekend(day):
        return WEEKEND
    return WEEKDAY


def add_days(day: DateLike, days: int) -> str:
    """Shift a date by a number of days (may be negative)."""
    return (parse_date(day) + timedelta(days=days)).isoformat()


def is_date_in_range(day: DateLike, start: DateLike, end: DateLike) -> bool:
    """Inclusive range check on canonical strings."""
    return normalize_date(start) <= normalize_date(day) <= normalize_date(end)


def generate_dates(start: DateLike, end: DateLike) -> Iterator[str]:
    """
    Yield every date from start to end inclusive as canonical strings.

    Empty if start is after end. Each call returns a new generator that
    starts again from ``start``.
    """
    current = parse_date(start)
    last = parse_date(end)
    step = timedelta(days=1)
    while current <= last:
        yield current.isoformat()
        current += step
