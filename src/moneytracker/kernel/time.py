"""
Time provider abstraction and calendar helpers

Budgets and summaries are computed over calendar windows ("today", "this
month", "last 7 days") in the user's local timezone. The provider hands out
timezone-aware datetimes; day and month boundaries are taken in whatever
timezone the provider's "now" carries.

Fun fact: Some countries have switched their time zone by a full day -
Samoa skipped December 30, 2011 entirely. Your "last 7 days" there only had six.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class TimeProvider(Protocol):
    """Protocol for time providers - allows deterministic testing"""

    def now(self) -> datetime:
        """Return the current timezone-aware datetime"""
        ...


class RealTimeProvider:
    """Production time provider using the system clock in local time"""

    def now(self) -> datetime:
        """Return current local time (aware, system timezone)"""
        return datetime.now(timezone.utc).astimezone()


class TestTimeProvider:
    """
    Controllable time provider for deterministic tests

    The timezone of the initial time acts as the "local" timezone for
    day and month boundaries.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, initial_time: datetime | None = None) -> None:
        """
        Initialize with optional fixed time

        Args:
            initial_time: Starting time (defaults to Unix epoch, UTC)
        """
        self._current_time = initial_time or datetime(1970, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        """Return current test time"""
        return self._current_time

    def set_time(self, dt: datetime) -> None:
        """Set current time to specific value"""
        self._current_time = dt

    def advance_days(self, days: int) -> None:
        """Advance time by specified days"""
        self._current_time += timedelta(days=days)


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive datetimes as local time"""
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def _is_local_fixed_offset(moment: datetime) -> bool:
    """True for the fixed-offset tzinfo that ``.astimezone()`` hands out"""
    return (
        isinstance(moment.tzinfo, timezone)
        and moment.utcoffset() == moment.astimezone().utcoffset()
    )


def _wall_clock(moment: datetime, wall: datetime) -> datetime:
    """
    Attach the right offset to a wall-clock time derived from moment

    A fixed local offset is only valid on one side of a DST change, so the
    boundary is re-resolved as local time. Zone-aware and non-local fixed
    offsets already do wall-clock arithmetic.
    """
    if _is_local_fixed_offset(moment):
        return wall.replace(tzinfo=None).astimezone()
    return wall


def start_of_day(moment: datetime) -> datetime:
    """Midnight of the calendar day containing ``moment`` (same timezone)"""
    return _wall_clock(moment, moment.replace(hour=0, minute=0, second=0, microsecond=0))


def start_of_month(moment: datetime) -> datetime:
    """Midnight of the first day of the month containing ``moment``"""
    return _wall_clock(
        moment, moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    )


def days_back(moment: datetime, days: int) -> datetime:
    """Start of today minus ``days`` whole days"""
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return _wall_clock(moment, midnight - timedelta(days=days))


# Global default time provider
default_time_provider: TimeProvider = RealTimeProvider()
