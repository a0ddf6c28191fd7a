# chronogrid/util/timeparse.py
from __future__ import annotations

import datetime as dt
import math
import re
from typing import List, Tuple, Union

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

DateLike = Union[dt.date, dt.datetime, str]


def round_half_up(x: float) -> int:
    # Grid math rounds .5 away from the earlier slot, never to even.
    return int(math.floor(x + 0.5))


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def parse_workhours(s: str) -> Tuple[int, int]:
    """Parse ``"07:00-22:00"`` into whole (start_hour, end_hour).

    The visible grid is hour-aligned, so minutes must be zero.
    """
    parts = s.split("-")
    if len(parts) != 2:
        raise ValueError("workhours must be like 07:00-22:00")
    sh, sm = parse_hhmm(parts[0])
    if parts[1].strip() == "24:00":
        eh, em = 24, 0
    else:
        eh, em = parse_hhmm(parts[1])
    if sm or em:
        raise ValueError("workhours must start and end on the hour")
    if eh <= sh:
        raise ValueError("workhours end must be after start")
    return sh, eh


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def _num(part: str) -> int:
    try:
        return int(part.strip())
    except (TypeError, ValueError):
        return 0


def to_decimal_hours(time_str: str | None) -> float:
    """``"09:30"`` -> 9.5. Missing or non-numeric parts count as zero."""
    if not time_str:
        return 0.0
    parts = str(time_str).split(":")
    hour = _num(parts[0])
    minute = _num(parts[1]) if len(parts) > 1 else 0
    return hour + minute / 60


def decimal_to_time(decimal: float) -> str:
    hour = int(math.floor(decimal))
    minute = round_half_up((decimal - hour) * 60)

    if minute == 60:
        minute = 0
        hour += 1

    if hour >= 24:
        hour = 0
        minute = 0

    return f"{hour:02d}:{minute:02d}"


def normalize_date_to_midnight(value: DateLike) -> dt.date:
    """Drop the time-of-day so dates compare by calendar day only.

    Strings must start with ``YYYY-MM-DD``; anything after the date part is
    ignored.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return parse_date_yyyy_mm_dd(str(value).strip()[:10])


def enumerate_dates(start: DateLike, end: DateLike) -> List[dt.date]:
    d0 = normalize_date_to_midnight(start)
    d1 = normalize_date_to_midnight(end)
    out: List[dt.date] = []
    cur = d0
    while cur <= d1:
        out.append(cur)
        cur = cur + dt.timedelta(days=1)
    return out


def format_date(d: DateLike) -> str:
    return normalize_date_to_midnight(d).isoformat()


def format_12h(hour: int, minute: int) -> str:
    if hour in (0, 24) and minute == 0:
        return "12:00 AM"
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour:02d}:{minute:02d} {suffix}"


def format_hour_label(hour: int) -> str:
    """Row label for the hour gutter, e.g. ``"09:00 AM"``."""
    return format_12h(hour, 0)
