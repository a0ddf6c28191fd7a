# chronogrid/gesture.py
"""Pointer gesture engine for creating events by dragging.

Two machines share one protocol (``pointer_down`` / ``pointer_move`` /
``pointer_up`` / ``cancel``):

  - ``TimeDragMachine``: day and week time grids, snapped 15-minute ranges.
  - ``MonthDragMachine``: month grid, whole-date ranges.

Rejected input (past dates, elapsed time today, clicks on existing events,
sub-threshold drags, a second pointer-down mid-drag) is dropped silently; it
is normal exploration, not an error. With ``CHRONOGRID_OBS_LOG=1`` each
rejection is reported on stderr.

Every exit path (release, global pointer-up, cancel, view change, close)
stops the auto-scroll timer.
"""

from __future__ import annotations

import datetime as dt
import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from .geometry import SNAP_MIN, pointer_to_time
from .model import ContainerRect, CreateIntent, DragPoint, DragState, ViewportSpec
from .timers import Scheduler
from .util.console import eprint, obs_enabled
from .util.timeparse import decimal_to_time, enumerate_dates, format_date, normalize_date_to_midnight
from .util.tz import Clock, decimal_hour_of, system_clock

MIN_DRAG_MIN = 15
SCROLL_ZONE_PX = 100.0
SCROLL_STEP_PX = 8.0
SCROLL_INTERVAL_S = 0.016
TIME_COLUMN_FRAC = 0.05


def _obs(msg: str) -> None:
    if obs_enabled():
        eprint(f"[chronogrid.gesture] {msg}")


class Phase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass
class ScrollContainer:
    """Live geometry of the scrolling grid element (mutated by auto-scroll)."""

    top: float
    height: float
    scroll_top: float = 0.0
    scroll_height: float = 0.0

    @property
    def max_scroll(self) -> float:
        return max(0.0, self.scroll_height - self.height)

    def rect(self) -> ContainerRect:
        return ContainerRect(top=self.top, height=self.height, scroll_top=self.scroll_top)


class AutoScroller:
    """Periodic edge scrolling while a drag is live.

    Acquire with ``update`` (idempotent for an unchanged direction), release
    with ``stop``. Also a context manager that always releases on exit.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        zone_px: float = SCROLL_ZONE_PX,
        step_px: float = SCROLL_STEP_PX,
        interval_s: float = SCROLL_INTERVAL_S,
    ) -> None:
        self._scheduler = scheduler
        self.zone_px = float(zone_px)
        self.step_px = float(step_px)
        self.interval_s = float(interval_s)
        self._handle: Any = None
        self._direction = 0
        self._container: Optional[ScrollContainer] = None
        self._run = 0
        self._lock = threading.RLock()

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def direction(self) -> int:
        return self._direction if self.running else 0

    def start(self, direction: int, container: ScrollContainer) -> None:
        with self._lock:
            if self.running:
                return
            self._run += 1
            run = self._run
            self._direction = 1 if direction > 0 else -1
            self._container = container
            self._handle = self._scheduler.call_every(self.interval_s, lambda: self._tick(run))

    def stop(self) -> None:
        with self._lock:
            handle = self._handle
            self._run += 1
            self._handle = None
            self._direction = 0
            self._container = None
        if handle is not None:
            self._scheduler.cancel(handle)

    def _tick(self, run: int) -> None:
        with self._lock:
            # A tick from a cancelled run may still be in flight.
            if run != self._run:
                return
            c = self._container
            if c is None:
                self.stop()
                return
            if self._direction > 0 and c.scroll_top < c.max_scroll:
                c.scroll_top = min(c.scroll_top + self.step_px, c.max_scroll)
            elif self._direction < 0 and c.scroll_top > 0:
                c.scroll_top = max(c.scroll_top - self.step_px, 0.0)
            else:
                self.stop()

    def wanted_direction(self, pointer_y: float, container: ScrollContainer, header_px: float = 0.0) -> int:
        rel = pointer_y - container.top - header_px
        scrollable = container.height - header_px
        if rel < self.zone_px and container.scroll_top > 0:
            return -1
        if rel > scrollable - self.zone_px and container.scroll_top < container.max_scroll:
            return 1
        return 0

    def update(self, pointer_y: float, container: ScrollContainer, header_px: float = 0.0) -> int:
        want = self.wanted_direction(pointer_y, container, header_px)
        if want == self.direction and container is self._container:
            return want
        self.stop()
        if want:
            self.start(want, container)
        return want

    def __enter__(self) -> "AutoScroller":
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()


def day_index_from_x(pointer_x: float, left: float, width: float, *, days: int = 7,
                     time_column_frac: float = TIME_COLUMN_FRAC) -> Optional[int]:
    """Week grid column under the pointer; None over the hour gutter or outside."""
    rel = pointer_x - left
    gutter = width * time_column_frac
    if rel <= gutter or width <= 0:
        return None
    col_w = (width - gutter) / days
    idx = int(math.floor((rel - gutter) / col_w))
    if 0 <= idx < days:
        return idx
    return None


class _DragBase:
    def __init__(self, *, clock: Clock, scroller: Optional[AutoScroller]) -> None:
        self._clock = clock
        self._scroller = scroller
        self.state: Optional[DragState] = None

    @property
    def phase(self) -> Phase:
        return Phase.DRAGGING if self.state is not None and self.state.active else Phase.IDLE

    @property
    def dragging(self) -> bool:
        return self.phase is Phase.DRAGGING

    def _today(self) -> dt.date:
        return self._clock().date()

    def _is_past(self, day: dt.date) -> bool:
        return day < self._today()

    def _autoscroll(self, pointer_y: Optional[float], container: Optional[ScrollContainer], header_px: float) -> None:
        if self._scroller is None or container is None or pointer_y is None:
            return
        self._scroller.update(pointer_y, container, header_px)

    def _stop_scroll(self) -> None:
        if self._scroller is not None:
            self._scroller.stop()

    def _clear(self) -> None:
        self._stop_scroll()
        self.state = None

    def cancel(self) -> None:
        if self.dragging:
            _obs("drag.cancel")
        self._clear()

    def pointer_leave(self) -> None:
        self._stop_scroll()

    def close(self) -> None:
        """Teardown: drop any live drag and release the timer."""
        self._clear()


class TimeDragMachine(_DragBase):
    """Drag-to-create on the day/week time grid."""

    def __init__(
        self,
        viewport: ViewportSpec,
        *,
        view: str = "day",
        clock: Clock = system_clock,
        scroller: Optional[AutoScroller] = None,
        min_duration_min: int = MIN_DRAG_MIN,
        snap_min: int = SNAP_MIN,
        scroll_header_px: Optional[float] = None,
    ) -> None:
        super().__init__(clock=clock, scroller=scroller)
        self.viewport = viewport
        self.view = view
        self.min_duration_min = int(min_duration_min)
        self.snap_min = int(snap_min)
        self.scroll_header_px = viewport.header_offset_px if scroll_header_px is None else float(scroll_header_px)

    @property
    def has_header(self) -> bool:
        return self.view == "week"

    def set_view(self, viewport: ViewportSpec, view: str) -> None:
        self.cancel()
        self.viewport = viewport
        self.view = view
        self.scroll_header_px = viewport.header_offset_px

    def _elapsed_today(self, day: dt.date, decimal: float) -> bool:
        now = self._clock()
        return day == now.date() and decimal < decimal_hour_of(now)

    def _time_at(self, pointer_y: float, container: ScrollContainer):
        return pointer_to_time(pointer_y, container.rect(), self.viewport, self.has_header, self.snap_min)

    def pointer_down(self, day: dt.date, pointer_y: float, container: ScrollContainer, *,
                     on_event: bool = False) -> bool:
        if self.dragging:
            _obs("drag.reject reason=already_dragging")
            return False
        if on_event:
            return False
        day = normalize_date_to_midnight(day)
        if self._is_past(day):
            _obs(f"drag.reject reason=past date={day.isoformat()}")
            return False

        tp = self._time_at(pointer_y, container)
        if self._elapsed_today(day, tp.decimal):
            _obs(f"drag.reject reason=elapsed time={tp.display}")
            return False

        point = DragPoint(date=day, time=tp)
        self.state = DragState(anchor=point, cursor=point)
        return True

    def pointer_move(self, day: dt.date, pointer_y: float, container: ScrollContainer) -> bool:
        if not self.dragging or self.state is None:
            return False
        # Edge scrolling follows the pointer over any column.
        self._autoscroll(pointer_y, container, self.scroll_header_px)

        day = normalize_date_to_midnight(day)
        if day != self.state.anchor.date or self._is_past(day):
            return False

        tp = self._time_at(pointer_y, container)
        if self._elapsed_today(day, tp.decimal):
            return False
        self.state.cursor = DragPoint(date=day, time=tp)
        return True

    def selection(self) -> Optional[tuple[dt.date, float, float]]:
        st = self.state
        if st is None or st.anchor.time is None or st.cursor.time is None:
            return None
        a = st.anchor.time.decimal
        c = st.cursor.time.decimal
        return st.anchor.date, min(a, c), max(a, c)

    def in_drag_range(self, day: dt.date, decimal: float) -> bool:
        sel = self.selection() if self.dragging else None
        if sel is None:
            return False
        d, lo, hi = sel
        return normalize_date_to_midnight(day) == d and lo <= decimal <= hi

    def pointer_up(self) -> Optional[CreateIntent]:
        st = self.state
        self._clear()
        if st is None or st.anchor.time is None or st.cursor.time is None:
            return None

        day = st.anchor.date
        if self._is_past(day):
            return None

        a = st.anchor.time
        c = st.cursor.time
        start, end = (a, c) if a.minutes <= c.minutes else (c, a)
        if self._elapsed_today(day, start.decimal):
            _obs("drag.discard reason=elapsed")
            return None
        if end.minutes - start.minutes < self.min_duration_min:
            _obs(f"drag.discard reason=short minutes={end.minutes - start.minutes}")
            return None

        date_s = format_date(day)
        return CreateIntent(
            date=date_s,
            end_date=date_s,
            source_view=self.view,
            start_time=decimal_to_time(start.decimal),
            end_time=decimal_to_time(end.decimal),
        )

    def global_pointer_up(self) -> Optional[CreateIntent]:
        if not self.dragging:
            self._clear()
            return None
        return self.pointer_up()


class MonthDragMachine(_DragBase):
    """Drag across month cells to select a date range."""

    def __init__(self, *, clock: Clock = system_clock, scroller: Optional[AutoScroller] = None,
                 scroll_header_px: float = 0.0) -> None:
        super().__init__(clock=clock, scroller=scroller)
        self.scroll_header_px = float(scroll_header_px)

    def pointer_down(self, day: dt.date, *, in_current_month: bool = True, on_event: bool = False) -> bool:
        if self.dragging:
            return False
        if on_event or not in_current_month:
            return False
        day = normalize_date_to_midnight(day)
        if self._is_past(day):
            _obs(f"month_drag.reject reason=past date={day.isoformat()}")
            return False
        point = DragPoint(date=day)
        self.state = DragState(anchor=point, cursor=point)
        return True

    def pointer_move(self, day: dt.date, pointer_y: Optional[float] = None,
                     container: Optional[ScrollContainer] = None) -> bool:
        if not self.dragging or self.state is None:
            return False
        self._autoscroll(pointer_y, container, self.scroll_header_px)
        day = normalize_date_to_midnight(day)
        if self._is_past(day):
            return False
        self.state.cursor = DragPoint(date=day)
        return True

    def selection(self) -> List[dt.date]:
        st = self.state
        if st is None:
            return []
        a = st.anchor.date
        c = st.cursor.date
        return enumerate_dates(min(a, c), max(a, c))

    def is_selected(self, day: dt.date) -> bool:
        sel = self.selection()
        return bool(sel) and sel[0] <= normalize_date_to_midnight(day) <= sel[-1]

    def pointer_up(self) -> Optional[CreateIntent]:
        selected = self.selection() if self.dragging else []
        self._clear()
        if not selected:
            return None
        if all(self._is_past(d) for d in selected):
            return None
        return CreateIntent(
            date=format_date(selected[0]),
            end_date=format_date(selected[-1]),
            source_view="month",
        )

    def global_pointer_up(self) -> Optional[CreateIntent]:
        return self.pointer_up()


def slot_click_intent(day: dt.date, hour: int, view: str, *, clock: Clock = system_clock,
                      dragging: bool = False) -> Optional[CreateIntent]:
    """Single click on an empty hour slot (no drag)."""
    if dragging:
        return None
    day = normalize_date_to_midnight(day)
    now = clock()
    if day < now.date():
        return None
    if day == now.date() and hour < decimal_hour_of(now):
        return None
    date_s = format_date(day)
    return CreateIntent(date=date_s, end_date=date_s, source_view=view)


def day_click_intent(day: dt.date, *, clock: Clock = system_clock, in_current_month: bool = True,
                     dragging: bool = False) -> Optional[CreateIntent]:
    """Single click on a month cell."""
    if dragging or not in_current_month:
        return None
    day = normalize_date_to_midnight(day)
    if day < clock().date():
        return None
    date_s = format_date(day)
    return CreateIntent(date=date_s, end_date=date_s, source_view="month")
