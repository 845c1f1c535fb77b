from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from flask import current_app

_EXTENSION_KEY = "scisubmit.clock"


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock(SystemClock):
    """Clock frozen at a given moment; tests move it explicitly."""

    def __init__(self, moment: datetime):
        self._moment = _aware(moment)

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime) -> None:
        self._moment = _aware(moment)

    def set_date(self, day: date) -> None:
        self._moment = datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)

    def advance(self, *, days: int = 0, hours: int = 0, minutes: int = 0) -> None:
        self._moment = self._moment + timedelta(days=days, hours=hours, minutes=minutes)


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def install_clock(app, clock: Optional[SystemClock] = None) -> SystemClock:
    clock = clock or SystemClock()
    app.extensions[_EXTENSION_KEY] = clock
    return clock


def get_clock() -> SystemClock:
    clock = current_app.extensions.get(_EXTENSION_KEY)
    if clock is None:
        clock = install_clock(current_app._get_current_object())
    return clock


def is_past(deadline: Optional[date], today: Optional[date] = None) -> bool:
    """True once ``today`` is strictly after ``deadline`` (the deadline day itself still counts)."""
    if deadline is None:
        return False
    if isinstance(deadline, datetime):
        deadline = deadline.date()
    today = today or get_clock().today()
    return today > deadline
