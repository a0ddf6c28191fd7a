# chronogrid/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

VIEWS = ("day", "week", "month")


@dataclass(frozen=True)
class Event:
    """Canonical event record. Read-only to the engine."""

    id: str
    title: str
    date: str                # YYYY-MM-DD, "" when unparseable
    end_date: str            # YYYY-MM-DD, == date for single-day events
    start_time: str          # HH:MM or ""
    end_time: str            # HH:MM or ""

    eventtype: str = ""
    subtype: str = ""
    mode: str = ""
    agenda: str = ""
    link: str = ""
    priority: str = ""       # "High" | "Medium" | "Low" | ""
    employees: Tuple[str, ...] = ()
    event_status: str = ""
    form_type: str = ""      # view the event was authored in
    employee_id: str = ""
    day: str = "workingday"
    audience: str = ""
    remarks: str = ""
    created_at: str = ""
    updated_at: str = ""

    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def is_multi_day(self) -> bool:
        return bool(self.end_date) and self.date != self.end_date

    @property
    def has_time(self) -> bool:
        return bool(self.start_time)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "endDate": self.end_date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "eventtype": self.eventtype,
            "subtype": self.subtype,
            "mode": self.mode,
            "agenda": self.agenda,
            "link": self.link,
            "priority": self.priority,
            "employees": list(self.employees),
            "eventStatus": self.event_status,
            "formType": self.form_type,
            "employeeID": self.employee_id,
            "day": self.day,
            "audience": self.audience,
            "remarks": self.remarks,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class ViewportSpec:
    visible_hour_start: float
    visible_hour_end: float
    pixels_per_hour: float = 64.0
    header_offset_px: float = 0.0


@dataclass(frozen=True)
class ContainerRect:
    """Scrollable grid container as seen by the pointer handlers."""

    top: float
    height: float = 0.0
    scroll_top: float = 0.0


@dataclass(frozen=True)
class TimePoint:
    hour: int
    minute: int
    decimal: float
    display: str

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute


@dataclass(frozen=True)
class DragPoint:
    date: dt.date
    time: Optional[TimePoint] = None  # None for month (whole-date) drags


@dataclass
class DragState:
    anchor: DragPoint
    cursor: DragPoint
    active: bool = True


@dataclass(frozen=True)
class ColumnSpan:
    start_column: int
    end_column: int
    is_start: bool = True   # bar begins inside this unit
    is_end: bool = True     # bar ends inside this unit

    @property
    def width(self) -> int:
        return self.end_column - self.start_column + 1

    def overlaps(self, other: "ColumnSpan") -> bool:
        return not (self.end_column < other.start_column or self.start_column > other.end_column)


@dataclass(frozen=True)
class TrackAssignment:
    lanes: Dict[str, int]
    spans: Dict[str, ColumnSpan]
    track_count: int


@dataclass(frozen=True)
class LayoutDescriptor:
    event_id: str
    top_offset_px: float
    height_px: float
    lane_index: int = 0
    lane_count: int = 1
    left_offset_px: float = 0.0
    column_span: Optional[ColumnSpan] = None


@dataclass(frozen=True)
class CreateIntent:
    date: str
    end_date: str
    source_view: str
    start_time: str = ""
    end_time: str = ""

    def to_record(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "endDate": self.end_date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "formType": self.source_view,
        }


# Config is a plain dict; see chronogrid.config.DEFAULT_CFG for the keys.
CalendarConfig = Dict[str, Any]


__all__ = [
    "VIEWS",
    "Event",
    "ViewportSpec",
    "ContainerRect",
    "TimePoint",
    "DragPoint",
    "DragState",
    "ColumnSpan",
    "TrackAssignment",
    "LayoutDescriptor",
    "CreateIntent",
    "CalendarConfig",
]
