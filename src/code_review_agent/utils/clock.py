"""Clock utilities so generated timestamps can be pinned in tests."""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """A protocol for objects that can provide the current time."""

    def now(self) -> datetime:
        """Return the current datetime, timezone-aware (UTC)."""
        ...


class SystemClock:
    """A clock that provides the real system time."""

    def now(self) -> datetime:
        """Return the current system datetime in UTC."""
        return datetime.now(timezone.utc)


class MockClock:
    """
    A clock with a settable time, for use in tests.
    All times are handled as UTC.
    """

    def __init__(self, initial_time: datetime | None = None) -> None:
        if initial_time and initial_time.tzinfo is None:
            raise ValueError("MockClock initial_time must be timezone-aware.")
        self._current_time: datetime = initial_time or datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._current_time

    def set_time(self, new_time: datetime) -> None:
        if new_time.tzinfo is None:
            raise ValueError("MockClock.set_time requires a timezone-aware datetime.")
        self._current_time = new_time

    def advance(self, duration: timedelta) -> None:
        self._current_time += duration


def isoformat_utc(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision and a 'Z' suffix."""
    utc_moment = moment.astimezone(timezone.utc)
    return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
