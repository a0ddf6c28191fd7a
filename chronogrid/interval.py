# chronogrid/interval.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .model import Event
from .util.timeparse import round_half_up

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

DEFAULT_DURATION_H = 1.0


@dataclass(frozen=True)
class EventTimeData:
    start_hour: int
    start_minute: int
    start_decimal: float

    end_hour: int
    end_minute: int
    end_decimal: float       # may be 24.0 (midnight rollover)

    display_end: str
    end_src: str             # "end_time" | "midnight_rollover" | "default"


def _parse_time(t: str) -> Optional[tuple[int, int]]:
    m = _TIME_RE.match((t or "").strip())
    if not m:
        return None
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 24 and 0 <= mm <= 59):
        return None
    if hh == 24 and mm:
        return None
    return hh, mm


def event_time_data(event: Event) -> Optional[EventTimeData]:
    """
    Decimal-hour interval of a timed event within its start day:
      - no (or unparseable) start -> None (header-only event)
      - end "00:00" with a start after midnight -> ends at 24.0
      - missing/unparseable end -> one hour after start, capped at 24.0
    """
    s = _parse_time(event.start_time)
    if s is None:
        return None
    sh, sm = s
    start_dec = sh + sm / 60

    e = _parse_time(event.end_time) if event.end_time else None
    if e is not None:
        eh, em = e
        end_dec = eh + em / 60
        src = "end_time"
        if eh == 0 and em == 0 and start_dec > 0:
            end_dec = 24.0
            src = "midnight_rollover"
    else:
        end_dec = min(start_dec + DEFAULT_DURATION_H, 24.0)
        eh = int(end_dec)
        em = round_half_up((end_dec - eh) * 60)
        src = "default"

    return EventTimeData(
        start_hour=sh,
        start_minute=sm,
        start_decimal=start_dec,
        end_hour=eh,
        end_minute=em,
        end_decimal=end_dec,
        display_end=f"{eh:02d}:{em:02d}",
        end_src=src,
    )


def intervals_overlap(start_a: float, end_a: float, start_b: float, end_b: float) -> bool:
    # Half-open: touching endpoints are not an overlap.
    return start_a < end_b and end_a > start_b


def events_overlap(a: Event, b: Event) -> bool:
    if a.id == b.id:
        return False
    ta = event_time_data(a)
    tb = event_time_data(b)
    if ta is None or tb is None:
        return False
    return intervals_overlap(ta.start_decimal, ta.end_decimal, tb.start_decimal, tb.end_decimal)


def overlaps_hour(event: Event, hour: int) -> bool:
    t = event_time_data(event)
    if t is None:
        return False
    return intervals_overlap(t.start_decimal, t.end_decimal, float(hour), float(hour + 1))
