# agendabot/core/clock.py
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidTargetDate(ValueError):
    """Target date is not a real calendar date in YYYY-MM-DD form."""


def parse_target_date(value: date | str) -> date:
    """Return a date for 'YYYY-MM-DD' (or a date passthrough); raise InvalidTargetDate otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise InvalidTargetDate(f"invalid date {value!r} (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidTargetDate(f"invalid date {value!r} (no such calendar day)") from None


class Clock:
    """Injectable, testable clock bound to one civil timezone (host tz is ignored)."""

    def __init__(self, tz: ZoneInfo):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def tomorrow(self) -> date:
        return self.add_days(self.today(), 1)

    @staticmethod
    def add_days(d: date, n: int) -> date:
        return d + timedelta(days=n)

    def at(self, d: date, hour: int, minute: int) -> datetime:
        """Wall-clock moment d HH:MM in this clock's timezone."""
        return datetime.combine(d, time(hour, minute), tzinfo=self.tz)
