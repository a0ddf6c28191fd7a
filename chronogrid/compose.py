# chronogrid/compose.py
"""View composition: canonical events + viewport -> layout for one view.

Every ``compose_*`` function is pure. ``ViewComposer`` adds memoization keyed
by the view inputs and the event-set generation.
"""

from __future__ import annotations

import datetime as dt
import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import DEFAULT_CFG, default_config, viewport_from_cfg
from .geometry import MIN_EVENT_HEIGHT_PX, event_positioning
from .interval import event_time_data, overlaps_hour
from .model import VIEWS, ColumnSpan, Event, LayoutDescriptor, ViewportSpec
from .tracks import allocate_tracks, assign_time_lanes, event_date_range, lane_offset_px
from .util.console import eprint, obs_enabled
from .util.timeparse import format_hour_label, normalize_date_to_midnight
from .util.tz import Clock, system_clock
from .util.viewkey import make_view_key


@dataclass(frozen=True)
class HourRow:
    hour: int
    label: str
    events: Tuple[Event, ...]                 # every timed event touching [hour, hour+1)
    descriptors: Tuple[LayoutDescriptor, ...]  # blocks drawn from this row


@dataclass(frozen=True)
class DayColumn:
    date: dt.date
    is_today: bool
    is_past: bool
    header_events: Tuple[Event, ...]
    hours: Tuple[HourRow, ...]


@dataclass(frozen=True)
class Bar:
    """A multi-day event drawn across the columns of one week-like row."""

    event: Event
    lane: int
    span: ColumnSpan


@dataclass(frozen=True)
class DayLayout:
    date: dt.date
    column: DayColumn
    view: str = "day"


@dataclass(frozen=True)
class WeekLayout:
    start: dt.date
    end: dt.date
    columns: Tuple[DayColumn, ...]
    bars: Tuple[Bar, ...]
    hidden_bar_count: int
    track_count: int
    expanded: bool = False
    view: str = "week"


@dataclass(frozen=True)
class MonthCell:
    date: dt.date
    is_current_month: bool
    is_today: bool
    is_past: bool
    events: Tuple[Event, ...]
    overflow: int
    event_count: int


@dataclass(frozen=True)
class MonthWeek:
    start: dt.date
    cells: Tuple[MonthCell, ...]
    bars: Tuple[Bar, ...]
    track_count: int


@dataclass(frozen=True)
class MonthLayout:
    year: int
    month: int
    weeks: Tuple[MonthWeek, ...]
    view: str = "month"


Layout = Union[DayLayout, WeekLayout, MonthLayout]


def _cfg(cfg: Optional[Mapping[str, Any]], key: str) -> Any:
    if cfg is None:
        return DEFAULT_CFG[key]
    return cfg.get(key, DEFAULT_CFG[key])


def _obs(msg: str) -> None:
    if obs_enabled():
        eprint(f"[chronogrid.compose] {msg}")


# --- calendar grids --------------------------------------------------------

def week_start(ref: dt.date) -> dt.date:
    """Sunday on or before ``ref``."""
    ref = normalize_date_to_midnight(ref)
    return ref - dt.timedelta(days=(ref.weekday() + 1) % 7)


def week_days(ref: dt.date) -> List[dt.date]:
    start = week_start(ref)
    return [start + dt.timedelta(days=i) for i in range(7)]


def month_grid(year: int, month: int) -> List[dt.date]:
    """42 dates (six Sunday-first weeks) covering the month."""
    start = week_start(dt.date(year, month, 1))
    return [start + dt.timedelta(days=i) for i in range(42)]


# --- per-date selection ----------------------------------------------------

def occurs_on(event: Event, day: dt.date) -> bool:
    rng = event_date_range(event)
    if rng is None:
        return False
    return rng[0] <= day <= rng[1]


def events_for_date(events: Iterable[Event], day: dt.date) -> List[Event]:
    day = normalize_date_to_midnight(day)
    return [ev for ev in events if occurs_on(ev, day)]


def event_count_for_date(events: Iterable[Event], day: dt.date) -> int:
    return len(events_for_date(events, day))


def counts_by_date(events: Sequence[Event], days: Iterable[dt.date]) -> Dict[str, int]:
    """Badge counts keyed by ISO date."""
    return {d.isoformat(): event_count_for_date(events, d) for d in days}


def _is_timed(ev: Event) -> bool:
    return event_time_data(ev) is not None


def header_events_for_date(events: Iterable[Event], day: dt.date, view: str = "day") -> List[Event]:
    """Events shown above the hour grid instead of inside it.

    Day view: untimed or multi-day events. Week view: single-day events that
    are untimed or were authored in the month view (multi-day events are
    drawn as bars there).
    """
    out: List[Event] = []
    for ev in events_for_date(events, day):
        if view == "week":
            if not ev.is_multi_day and (not _is_timed(ev) or ev.form_type == "month"):
                out.append(ev)
        elif ev.is_multi_day or not _is_timed(ev):
            out.append(ev)
    return out


def timed_events_for_date(events: Iterable[Event], day: dt.date, view: str = "day") -> List[Event]:
    out: List[Event] = []
    for ev in events_for_date(events, day):
        if ev.is_multi_day or not _is_timed(ev):
            continue
        if view == "week" and ev.form_type == "month":
            continue
        out.append(ev)
    return out


# --- hour grid -------------------------------------------------------------

def _visible_hours(viewport: ViewportSpec) -> range:
    """Hour rows from the start hour through the end hour (last row is 23)."""
    last = min(int(math.ceil(viewport.visible_hour_end)), 23)
    return range(int(math.floor(viewport.visible_hour_start)), last + 1)


def _in_rows(ev: Event, hours: range) -> bool:
    return any(overlaps_hour(ev, h) for h in hours)


def hour_rows(
    timed: Sequence[Event],
    viewport: ViewportSpec,
    cfg: Optional[Mapping[str, Any]] = None,
) -> Tuple[HourRow, ...]:
    hours = _visible_hours(viewport)
    if not hours:
        return ()
    lanes = assign_time_lanes(timed)
    stride = float(_cfg(cfg, "lane_stride_px"))
    max_off = float(_cfg(cfg, "max_lane_offset_px"))
    min_h = float(_cfg(cfg, "min_event_height_px") or MIN_EVENT_HEIGHT_PX)

    by_row: Dict[int, List[LayoutDescriptor]] = {h: [] for h in hours}
    for ev in timed:
        pos = event_positioning(ev, viewport, min_h)
        if pos is None:
            continue
        touched = [h for h in hours if overlaps_hour(ev, h)]
        if not touched:
            continue
        # Blocks that start above the window are drawn from its first row.
        row = pos.start_hour if pos.start_hour in by_row else touched[0]
        tl = lanes.get(ev.id)
        lane = tl.lane if tl is not None else 0
        by_row[row].append(
            LayoutDescriptor(
                event_id=ev.id,
                top_offset_px=pos.top_px,
                height_px=pos.height_px,
                lane_index=lane,
                lane_count=tl.lane_count if tl is not None else 1,
                left_offset_px=lane_offset_px(lane, stride, max_off),
            )
        )

    rows: List[HourRow] = []
    for h in hours:
        rows.append(
            HourRow(
                hour=h,
                label=format_hour_label(h),
                events=tuple(ev for ev in timed if overlaps_hour(ev, h)),
                descriptors=tuple(sorted(by_row[h], key=lambda d: (d.lane_index, d.top_offset_px))),
            )
        )
    return tuple(rows)


def day_column(
    events: Sequence[Event],
    day: dt.date,
    viewport: ViewportSpec,
    *,
    view: str = "day",
    cfg: Optional[Mapping[str, Any]] = None,
    today: Optional[dt.date] = None,
) -> DayColumn:
    day = normalize_date_to_midnight(day)
    today = today or system_clock().date()
    hours = _visible_hours(viewport)
    timed = timed_events_for_date(events, day, view)
    # Timed events wholly outside the rows are listed above the grid.
    outside = [ev for ev in timed if not _in_rows(ev, hours)]
    if outside:
        _obs(f"date={day.isoformat()} {len(outside)} timed event(s) outside visible hours")
    return DayColumn(
        date=day,
        is_today=day == today,
        is_past=day < today,
        header_events=tuple(header_events_for_date(events, day, view)) + tuple(outside),
        hours=hour_rows([ev for ev in timed if _in_rows(ev, hours)], viewport, cfg),
    )


def _bars(events: Iterable[Event], unit_start: dt.date) -> Tuple[Tuple[Bar, ...], int]:
    multi = [ev for ev in events if ev.is_multi_day]
    ta = allocate_tracks(multi, unit_start, 7)
    by_id = {ev.id: ev for ev in multi}
    bars = [Bar(event=by_id[eid], lane=lane, span=ta.spans[eid]) for eid, lane in ta.lanes.items()]
    bars.sort(key=lambda b: (b.lane, b.span.start_column))
    return tuple(bars), ta.track_count


# --- views -----------------------------------------------------------------

def compose_day(
    events: Sequence[Event],
    day: dt.date,
    viewport: ViewportSpec,
    *,
    cfg: Optional[Mapping[str, Any]] = None,
    today: Optional[dt.date] = None,
) -> DayLayout:
    col = day_column(events, day, viewport, view="day", cfg=cfg, today=today)
    return DayLayout(date=col.date, column=col)


def compose_week(
    events: Sequence[Event],
    ref: dt.date,
    viewport: ViewportSpec,
    *,
    cfg: Optional[Mapping[str, Any]] = None,
    today: Optional[dt.date] = None,
    expanded: bool = False,
) -> WeekLayout:
    days = week_days(ref)
    bars, track_count = _bars(events, days[0])
    visible = int(_cfg(cfg, "week_multiday_visible"))
    hidden = 0
    if not expanded and len(bars) > visible:
        hidden = len(bars) - visible
        bars = bars[:visible]
    return WeekLayout(
        start=days[0],
        end=days[-1],
        columns=tuple(day_column(events, d, viewport, view="week", cfg=cfg, today=today) for d in days),
        bars=bars,
        hidden_bar_count=hidden,
        track_count=track_count,
        expanded=bool(expanded),
    )


def compose_month(
    events: Sequence[Event],
    ref: dt.date,
    *,
    cfg: Optional[Mapping[str, Any]] = None,
    today: Optional[dt.date] = None,
) -> MonthLayout:
    ref = normalize_date_to_midnight(ref)
    today = today or system_clock().date()
    cap = int(_cfg(cfg, "month_cell_max_events"))
    grid = month_grid(ref.year, ref.month)

    weeks: List[MonthWeek] = []
    for w in range(6):
        days = grid[w * 7:(w + 1) * 7]
        bars, track_count = _bars(events, days[0])
        cells: List[MonthCell] = []
        for d in days:
            on_day = events_for_date(events, d)
            single = sorted((ev for ev in on_day if not ev.is_multi_day), key=lambda e: (e.start_time, e.id))
            cells.append(
                MonthCell(
                    date=d,
                    is_current_month=d.month == ref.month,
                    is_today=d == today,
                    is_past=d < today,
                    events=tuple(single[:cap]),
                    overflow=max(0, len(single) - cap),
                    event_count=len(on_day),
                )
            )
        weeks.append(MonthWeek(start=days[0], cells=tuple(cells), bars=bars, track_count=track_count))

    return MonthLayout(year=ref.year, month=ref.month, weeks=tuple(weeks))


def compose_view(
    events: Sequence[Event],
    view: str,
    ref: dt.date,
    viewport: ViewportSpec,
    *,
    cfg: Optional[Mapping[str, Any]] = None,
    today: Optional[dt.date] = None,
    expanded: bool = False,
) -> Layout:
    if view == "day":
        return compose_day(events, ref, viewport, cfg=cfg, today=today)
    if view == "week":
        return compose_week(events, ref, viewport, cfg=cfg, today=today, expanded=expanded)
    if view == "month":
        return compose_month(events, ref, cfg=cfg, today=today)
    raise ValueError(f"unknown view {view!r} (expected one of {', '.join(VIEWS)})")


class ViewComposer:
    """Holds the current event set and memoizes composed layouts.

    At most ``cache_size`` layouts are kept; the least recently used is
    evicted first.
    """

    def __init__(
        self,
        cfg: Optional[Mapping[str, Any]] = None,
        *,
        clock: Clock = system_clock,
        cache_size: int = 32,
    ) -> None:
        if cache_size < 1:
            raise ValueError("cache_size must be >= 1")
        self.cfg: Dict[str, Any] = dict(cfg) if cfg is not None else default_config()
        self._clock = clock
        self._events: Tuple[Event, ...] = ()
        self._generation = 0
        self._cache_size = int(cache_size)
        self._cache: OrderedDict[str, Tuple[tuple, Layout]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    def set_events(self, events: Iterable[Event]) -> None:
        """Replace the event set wholesale and drop every cached layout."""
        self._events = tuple(events)
        self._generation += 1
        self._cache.clear()

    def viewport(self, view: str) -> ViewportSpec:
        return viewport_from_cfg(self.cfg, view)

    def compose(self, view: str, ref_date: Any, *, expanded: bool = False) -> Layout:
        if view not in VIEWS:
            raise ValueError(f"unknown view {view!r} (expected one of {', '.join(VIEWS)})")
        ref = normalize_date_to_midnight(ref_date)
        vp = self.viewport(view)
        today = self._clock().date()

        key = make_view_key(
            view,
            ref,
            vp.visible_hour_start,
            vp.visible_hour_end,
            vp.pixels_per_hour,
            vp.header_offset_px,
            self._generation,
            expanded,
        )
        inputs = (view, ref, vp, self._generation, bool(expanded), today)
        hit = self._cache.get(key)
        if hit is not None and hit[0] == inputs:
            self.hits += 1
            self._cache.move_to_end(key)
            return hit[1]

        self.misses += 1
        layout = compose_view(self._events, view, ref, vp, cfg=self.cfg, today=today, expanded=expanded)
        self._cache[key] = (inputs, layout)
        self._cache.move_to_end(key)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        _obs(f"layout view={view} date={ref.isoformat()} key={key} events={len(self._events)}")
        return layout
