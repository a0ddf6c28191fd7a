# chronogrid/util/tz.py
from __future__ import annotations

import datetime as dt
from typing import Callable

# All grid arithmetic is local wall-clock; a clock is any zero-arg callable
# returning a naive local datetime.
Clock = Callable[[], dt.datetime]


def system_clock() -> dt.datetime:
    return dt.datetime.now()


def today_date(clock: Clock = system_clock) -> dt.date:
    return clock().date()


def decimal_hour_of(moment: dt.datetime) -> float:
    return moment.hour + moment.minute / 60


def fixed_clock(moment: dt.datetime) -> Clock:
    """Clock frozen at ``moment`` (used by tools and tests)."""

    def _clock() -> dt.datetime:
        return moment

    return _clock
