"""
Clock abstractions for deterministic "today" handling.

Sprint dates are plain calendar dates, so every place that needs "today"
(config defaults, the fallback dataset, remaining-bandwidth metrics) asks a
Clock instead of calling datetime.now() directly. Tests pass a FrozenClock to
pin the current month; production code uses RealClock.

**Why local time?** A sprint board is read by people in their own timezone.
Using UTC would flip "today" a few hours early or late for most users (the
classic Feb 8 vs Feb 9 bug), so RealClock reports local wall-clock time.
"""

import calendar
from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    """
    Abstract time source protocol.

    Consumers accept a Clock (constructor or function parameter) and call
    clock.now() whenever they need the current time.
    """

    def now(self) -> datetime:
        """Return the current time according to this clock."""
        ...


class RealClock:
    """Clock that returns the current local system time (timezone-aware)."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FrozenClock:
    """
    Clock that always returns a fixed timestamp (for deterministic tests).

    **Usage**:
        clock = FrozenClock(datetime(2025, 3, 14, 9, 0))
        today(clock)  # date(2025, 3, 14)
    """

    def __init__(self, fixed_now: datetime):
        """
        Initialize a FrozenClock with a fixed timestamp.

        Args:
            fixed_now: The datetime to return on every call to now().
        """
        self._fixed_now = fixed_now

    def now(self) -> datetime:
        return self._fixed_now


def get_real_clock() -> Clock:
    """Factory function to create a RealClock instance."""
    return RealClock()


def today(clock: Clock | None = None) -> date:
    """
    Return the calendar date of "now" according to the clock.

    Args:
        clock: Time source. Defaults to RealClock when None.

    Returns:
        datetime.date for the clock's current day.
    """
    clock = clock or RealClock()
    return clock.now().date()


def month_bounds(day: date) -> tuple[date, date]:
    """
    Return the first and last calendar day of the month containing `day`.

    Example:
        >>> month_bounds(date(2024, 2, 10))
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)
