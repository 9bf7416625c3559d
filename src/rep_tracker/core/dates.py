"""
Date and calendar utilities.

Every comparison in the engine goes through day truncation (to_day), so
time-of-day and sub-second artifacts never affect which calendar day a
workout belongs to. All functions are pure.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator

ONE_DAY = timedelta(days=1)


class InvalidRangeError(ValueError):
    """Raised when a date range has its start after its end."""

    pass


def to_day(value: date | datetime) -> date:
    """Truncate a date or datetime to its local calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    """True iff a and b fall on the same calendar day; time is ignored."""
    return to_day(a) == to_day(b)


def days_between(a: date | datetime, b: date | datetime) -> int:
    """Absolute difference in calendar days."""
    return abs((to_day(b) - to_day(a)).days)


def days_ago(value: date | datetime, now: date | datetime) -> int:
    """
    Number of calendar days from value to now.

    0 means today, 1 yesterday; negative for future dates.
    """
    return (to_day(now) - to_day(value)).days


def week_start(value: date | datetime) -> date:
    """
    Monday of the ISO week containing value.

    Sunday maps to the Monday six days before it.
    """
    d = to_day(value)
    return d - timedelta(days=d.weekday())


def month_start(value: date | datetime) -> date:
    """First day of the month containing value."""
    return to_day(value).replace(day=1)


def month_end(value: date | datetime) -> date:
    """Last day of the month containing value."""
    d = to_day(value)
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def year_start(value: date | datetime) -> date:
    """January 1st of the year containing value."""
    return to_day(value).replace(month=1, day=1)


def year_end(value: date | datetime) -> date:
    """December 31st of the year containing value."""
    return to_day(value).replace(month=12, day=31)


def days_in_year(year: int) -> int:
    """366 for leap years, else 365."""
    return 366 if calendar.isleap(year) else 365


def shift_months(value: date | datetime, months: int) -> date:
    """
    Move a date by whole calendar months.

    The day-of-month is clamped to the target month's length
    (e.g. March 31 minus one month -> February 28/29).
    """
    d = to_day(value)
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last))


def shift_years(value: date | datetime, years: int) -> date:
    """Move a date by whole years; February 29 becomes February 28."""
    return shift_months(value, 12 * years)


class DayRange:
    """
    Every calendar day from start to end inclusive.

    Lazy and restartable: each iteration starts again from ``start``.
    Supports len() and membership tests without materialising the days.
    """

    __slots__ = ("start", "end")

    def __init__(self, start: date, end: date):
        if start > end:
            raise InvalidRangeError(f"Invalid range: {start} is after {end}")
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += ONE_DAY

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, date):
            return False
        return self.start <= to_day(value) <= self.end

    def __repr__(self) -> str:
        return f"DayRange({self.start.isoformat()}, {self.end.isoformat()})"


def enumerate_days(start: date | datetime, end: date | datetime) -> DayRange:
    """
    Return the sequence of every calendar day in [start, end].

    Raises:
        InvalidRangeError: If start is after end
    """
    return DayRange(to_day(start), to_day(end))


def parse_day(value: str) -> date:
    """
    Parse an ISO date (YYYY-MM-DD) or datetime string to a calendar day.

    Timezone-aware timestamps are converted to local time first, so the
    day is the local calendar day.

    Raises:
        ValueError: If the string is not ISO formatted
    """
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    stamp = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone()
    return stamp.date()
