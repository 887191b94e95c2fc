from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

import pytz


@dataclass
class TradingCalendar:
    """Session calendar used to time DAY orders.

    Each calendar declares a `timezone` string (IANA identifier) and the local
    `close_time` of its trading session. Naive datetimes are interpreted in the
    calendar timezone.
    """

    name: str
    timezone: str
    close_time: time = time(16, 0)

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)

    def localize(self, dt: datetime) -> datetime:
        """Return ``dt`` expressed in the calendar timezone."""
        tz = self.tz
        if dt.tzinfo is None:
            return tz.localize(dt)
        return dt.astimezone(tz)

    def next_close(self, after: datetime) -> datetime:
        """Return the first session close strictly after ``after``.

        :param after: Submission instant, aware or naive (calendar-local).
        :type after: datetime
        :returns: Timezone-aware close instant in the calendar timezone.
        :rtype: datetime
        :Example:
            >>> get_calendar('NYSE').next_close(datetime(2025, 6, 2, 10))
        """
        local = self.localize(after)
        close = self._close_on(local.date())
        if close <= local:
            close = self._close_on(local.date() + timedelta(days=1))
        return close

    def _close_on(self, day) -> datetime:
        # localize() resolves the DST offset for that date
        return self.tz.localize(datetime.combine(day, self.close_time))


@dataclass
class TwentyFourSevenCalendar(TradingCalendar):
    """Calendar for 24/7 markets (e.g., crypto); the session rolls at UTC midnight."""

    name: str = "24/7"
    timezone: str = "UTC"
    close_time: time = time(0, 0)
