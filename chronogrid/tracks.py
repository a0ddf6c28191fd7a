# chronogrid/tracks.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .interval import event_time_data, intervals_overlap
from .model import ColumnSpan, Event, TrackAssignment
from .util.timeparse import normalize_date_to_midnight

T = TypeVar("T")

LANE_STRIDE_PX = 60.0
MAX_LANE_OFFSET_PX = 180.0


def event_date_range(event: Event) -> Optional[Tuple[dt.date, dt.date]]:
    """Inclusive (start, end) calendar dates; None when the date is unusable."""
    try:
        start = normalize_date_to_midnight(event.date)
        end = normalize_date_to_midnight(event.end_date or event.date)
    except ValueError:
        return None
    if end < start:
        end = start
    return start, end


def column_span(event: Event, unit_start: dt.date, days: int = 7) -> Optional[ColumnSpan]:
    """Columns an event's date range covers in a ``days``-wide unit.

    Returns None when the event does not intersect the unit.
    """
    de = event_date_range(event)
    if de is None:
        return None
    start, end = de
    unit_start = normalize_date_to_midnight(unit_start)
    unit_end = unit_start + dt.timedelta(days=days - 1)
    if start > unit_end or end < unit_start:
        return None

    return ColumnSpan(
        start_column=max(0, (start - unit_start).days),
        end_column=min(days - 1, (end - unit_start).days),
        is_start=start >= unit_start,
        is_end=end <= unit_end,
    )


def _place_first_fit(tracks: List[List[T]], item: T, fits: Callable[[T, T], bool]) -> int:
    # First track whose occupants all accept the item; otherwise a new track.
    for i, occupants in enumerate(tracks):
        if all(fits(item, other) for other in occupants):
            occupants.append(item)
            return i
    tracks.append([item])
    return len(tracks) - 1


def allocate_tracks(events: Iterable[Event], unit_start: dt.date, days: int = 7) -> TrackAssignment:
    """Greedy lane assignment for multi-day bars inside one week-like unit.

    Order: start column ascending, wider bars first, then input order.
    """
    items: List[Tuple[Event, ColumnSpan]] = []
    for ev in events:
        span = column_span(ev, unit_start, days)
        if span is None:
            continue
        items.append((ev, span))

    items.sort(key=lambda x: (x[1].start_column, -x[1].width))

    tracks: List[List[ColumnSpan]] = []
    lanes: Dict[str, int] = {}
    spans: Dict[str, ColumnSpan] = {}
    for ev, span in items:
        lanes[ev.id] = _place_first_fit(tracks, span, lambda a, b: not a.overlaps(b))
        spans[ev.id] = span

    return TrackAssignment(lanes=lanes, spans=spans, track_count=len(tracks))


@dataclass(frozen=True)
class TimedLane:
    lane: int
    lane_count: int
    cluster_id: int


def assign_time_lanes(events: Sequence[Event]) -> Dict[str, TimedLane]:
    """Lanes for timed events sharing one column (an hour row or a day).

    Events are grouped into overlap clusters; each cluster is colored
    greedily so overlapping events never share a lane and back-to-back
    events do. Untimed events are skipped.
    """
    timed: List[Tuple[float, float, Event]] = []
    for ev in events:
        t = event_time_data(ev)
        if t is None:
            continue
        timed.append((t.start_decimal, t.end_decimal, ev))
    timed.sort(key=lambda x: (x[0], -(x[1] - x[0])))

    clusters: List[List[Tuple[float, float, Event]]] = []
    cur: List[Tuple[float, float, Event]] = []
    max_end = -1.0
    for item in timed:
        if cur and item[0] < max_end:
            cur.append(item)
            max_end = max(max_end, item[1])
            continue
        if cur:
            clusters.append(cur)
        cur = [item]
        max_end = item[1]
    if cur:
        clusters.append(cur)

    out: Dict[str, TimedLane] = {}
    for cluster_id, group in enumerate(clusters):
        tracks: List[List[Tuple[float, float, Event]]] = []
        assigned: List[Tuple[str, int]] = []
        for item in group:
            lane = _place_first_fit(
                tracks,
                item,
                lambda a, b: not intervals_overlap(a[0], a[1], b[0], b[1]),
            )
            assigned.append((item[2].id, lane))
        total = max(1, len(tracks))
        for ev_id, lane in assigned:
            out[ev_id] = TimedLane(lane=lane, lane_count=total, cluster_id=cluster_id)
    return out


def lane_offset_px(
    lane: int,
    stride_px: float = LANE_STRIDE_PX,
    max_offset_px: float = MAX_LANE_OFFSET_PX,
) -> float:
    """Horizontal shift for a stacked event; capped so deep stacks stay on-grid."""
    return min(max(0, lane) * stride_px, max_offset_px)
