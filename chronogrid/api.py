"""chronogrid.api

Stable *library* entrypoint for chronogrid.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from chronogrid.compose import (
    DayLayout,
    MonthLayout,
    ViewComposer,
    WeekLayout,
    compose_day,
    compose_month,
    compose_view,
    compose_week,
    event_count_for_date,
    events_for_date,
    header_events_for_date,
    month_grid,
    week_days,
)
from chronogrid.config import DEFAULT_CFG, load_config, viewport_from_cfg
from chronogrid.export import dumps_layout, layout_to_dict
from chronogrid.geometry import event_positioning, hour_to_offset, pointer_to_time
from chronogrid.gesture import (
    AutoScroller,
    MonthDragMachine,
    Phase,
    ScrollContainer,
    TimeDragMachine,
    day_click_intent,
    slot_click_intent,
)
from chronogrid.interval import event_time_data, events_overlap, intervals_overlap
from chronogrid.model import (
    ColumnSpan,
    ContainerRect,
    CreateIntent,
    DragState,
    Event,
    LayoutDescriptor,
    TimePoint,
    TrackAssignment,
    ViewportSpec,
)
from chronogrid.normalize import derive_status, is_meeting_like, normalize_event, normalize_events
from chronogrid.service import EventFeed, EventReadApi, EventWriteApi, InMemoryEventApi, view_range
from chronogrid.timers import Scheduler, ThreadingScheduler
from chronogrid.tracks import allocate_tracks, assign_time_lanes, column_span
from chronogrid.util.timeparse import decimal_to_time, enumerate_dates, normalize_date_to_midnight, to_decimal_hours
from chronogrid.validate import ConfigValidationError, assert_valid_config, validate_config

# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
_PUBLIC_EXPORTS = (
    "AutoScroller",
    "ColumnSpan",
    "ConfigValidationError",
    "ContainerRect",
    "CreateIntent",
    "DEFAULT_CFG",
    "DayLayout",
    "DragState",
    "Event",
    "EventFeed",
    "EventReadApi",
    "EventWriteApi",
    "InMemoryEventApi",
    "LayoutDescriptor",
    "MonthDragMachine",
    "MonthLayout",
    "Phase",
    "Scheduler",
    "ScrollContainer",
    "ThreadingScheduler",
    "TimeDragMachine",
    "TimePoint",
    "TrackAssignment",
    "ViewComposer",
    "ViewportSpec",
    "WeekLayout",
    "allocate_tracks",
    "assert_valid_config",
    "assign_time_lanes",
    "column_span",
    "compose_day",
    "compose_month",
    "compose_view",
    "compose_week",
    "day_click_intent",
    "decimal_to_time",
    "derive_status",
    "dumps_layout",
    "enumerate_dates",
    "event_count_for_date",
    "event_positioning",
    "event_time_data",
    "events_for_date",
    "events_overlap",
    "header_events_for_date",
    "hour_to_offset",
    "intervals_overlap",
    "is_meeting_like",
    "layout_to_dict",
    "load_config",
    "month_grid",
    "normalize_date_to_midnight",
    "normalize_event",
    "normalize_events",
    "pointer_to_time",
    "slot_click_intent",
    "to_decimal_hours",
    "validate_config",
    "view_range",
    "viewport_from_cfg",
    "week_days",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
