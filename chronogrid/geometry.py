# chronogrid/geometry.py
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .interval import event_time_data
from .model import ContainerRect, Event, TimePoint, ViewportSpec
from .util.timeparse import format_12h, round_half_up
from .util.tz import decimal_hour_of

SNAP_MIN = 15
MIN_EVENT_HEIGHT_PX = 20.0


def hour_to_offset(decimal_hour: float, viewport: ViewportSpec) -> float:
    return (decimal_hour - viewport.visible_hour_start) * viewport.pixels_per_hour


def clamp_bounds_min(viewport: ViewportSpec, has_header: bool, snap_min: int = SNAP_MIN) -> Tuple[int, int]:
    """Minute bounds a snapped pointer time may take.

    Day grids stay inside the visible working window; the week grid
    (the one with a sticky header) always spans the full 24 hours.
    """
    if has_header:
        lo, hi = 0, 24 * 60
    else:
        lo = int(round(viewport.visible_hour_start * 60))
        hi = int(round(viewport.visible_hour_end * 60))
    lo = int(math.ceil(lo / snap_min)) * snap_min
    hi = int(math.floor(hi / snap_min)) * snap_min
    return lo, hi


def time_point(total_min: int) -> TimePoint:
    hour, minute = divmod(int(total_min), 60)
    if hour >= 24:
        hour, minute = 24, 0
    return TimePoint(hour=hour, minute=minute, decimal=hour + minute / 60, display=format_12h(hour, minute))


def pointer_to_time(
    pointer_y: float,
    container: ContainerRect,
    viewport: ViewportSpec,
    has_header: bool = False,
    snap_min: int = SNAP_MIN,
) -> TimePoint:
    rel = pointer_y - container.top + container.scroll_top
    if has_header:
        rel -= viewport.header_offset_px
    rel = max(0.0, rel)

    decimal = rel / viewport.pixels_per_hour + viewport.visible_hour_start
    snapped = round_half_up(decimal * 60 / snap_min) * snap_min

    lo, hi = clamp_bounds_min(viewport, has_header, snap_min)
    return time_point(max(lo, min(hi, snapped)))


@dataclass(frozen=True)
class EventPlacement:
    top_px: float          # from the top of the visible grid
    cell_offset_px: float  # from the top of the start-hour row
    height_px: float
    start_hour: int
    end_hour: int          # last hour row the block reaches


def event_positioning(
    event: Event,
    viewport: ViewportSpec,
    min_height_px: float = MIN_EVENT_HEIGHT_PX,
) -> Optional[EventPlacement]:
    t = event_time_data(event)
    if t is None:
        return None
    pph = viewport.pixels_per_hour
    duration = t.end_decimal - t.start_decimal
    return EventPlacement(
        top_px=hour_to_offset(t.start_decimal, viewport),
        cell_offset_px=(t.start_minute / 60) * pph,
        height_px=max(duration * pph, min_height_px),
        start_hour=int(math.floor(t.start_decimal)),
        end_hour=23 if t.end_decimal == 24 else int(math.floor(t.end_decimal)),
    )


def hour_fill_range(hour: int, start_decimal: float, end_decimal: float) -> Optional[Tuple[float, float]]:
    """Percent band of one hour row covered by ``[start, end]`` (drag overlay)."""
    lo = min(start_decimal, end_decimal)
    hi = max(start_decimal, end_decimal)
    if not (hour <= hi and hour + 1 > lo):
        return None
    start_pct = max(0.0, (lo - hour) * 100)
    end_pct = min(100.0, (hi - hour) * 100)
    if end_pct <= start_pct:
        return None
    return start_pct, end_pct


def elapsed_percent(day: dt.date, hour: int, now: dt.datetime) -> float:
    """How much of the hour row has already passed (past-time shading)."""
    today = now.date()
    if day < today:
        return 100.0
    if day > today:
        return 0.0
    cur = decimal_hour_of(now)
    if hour + 1 <= cur:
        return 100.0
    if hour <= cur < hour + 1:
        return (cur - hour) * 100
    return 0.0


def now_line_offset(now: dt.datetime, viewport: ViewportSpec) -> Optional[float]:
    cur = decimal_hour_of(now)
    if not (viewport.visible_hour_start <= cur <= viewport.visible_hour_end):
        return None
    return hour_to_offset(cur, viewport)

