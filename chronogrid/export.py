# chronogrid/export.py
from __future__ import annotations

import json
from typing import Any, Dict, List

from .compose import Bar, DayColumn, DayLayout, HourRow, Layout, MonthLayout, WeekLayout
from .model import ColumnSpan, Event, LayoutDescriptor

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore


def _span(span: ColumnSpan | None) -> Dict[str, Any] | None:
    if span is None:
        return None
    return {
        "startColumn": span.start_column,
        "endColumn": span.end_column,
        "width": span.width,
        "isStart": span.is_start,
        "isEnd": span.is_end,
    }


def _descriptor(d: LayoutDescriptor) -> Dict[str, Any]:
    return {
        "eventId": d.event_id,
        "topOffsetPx": d.top_offset_px,
        "heightPx": d.height_px,
        "laneIndex": d.lane_index,
        "laneCount": d.lane_count,
        "leftOffsetPx": d.left_offset_px,
        "columnSpan": _span(d.column_span),
    }


def _ids(events: tuple[Event, ...]) -> List[str]:
    return [ev.id for ev in events]


def _hour(row: HourRow) -> Dict[str, Any]:
    return {
        "hour": row.hour,
        "label": row.label,
        "eventIds": _ids(row.events),
        "blocks": [_descriptor(d) for d in row.descriptors],
    }


def _column(col: DayColumn) -> Dict[str, Any]:
    return {
        "date": col.date.isoformat(),
        "isToday": col.is_today,
        "isPast": col.is_past,
        "headerEventIds": _ids(col.header_events),
        "hours": [_hour(r) for r in col.hours],
    }


def _bar(bar: Bar) -> Dict[str, Any]:
    return {"eventId": bar.event.id, "lane": bar.lane, "span": _span(bar.span)}


def _events_index(layout: Layout) -> Dict[str, Dict[str, Any]]:
    seen: Dict[str, Dict[str, Any]] = {}

    def add(evs: tuple[Event, ...]) -> None:
        for ev in evs:
            seen.setdefault(ev.id, ev.to_record())

    cols: List[DayColumn] = []
    if isinstance(layout, DayLayout):
        cols = [layout.column]
    elif isinstance(layout, WeekLayout):
        cols = list(layout.columns)
        add(tuple(b.event for b in layout.bars))
    elif isinstance(layout, MonthLayout):
        for w in layout.weeks:
            add(tuple(b.event for b in w.bars))
            for c in w.cells:
                add(c.events)
    for col in cols:
        add(col.header_events)
        for r in col.hours:
            add(r.events)
    return seen


def layout_to_dict(layout: Layout) -> Dict[str, Any]:
    """JSON-ready dict for a composed layout; events are listed once by id."""
    out: Dict[str, Any] = {"view": layout.view}
    if isinstance(layout, DayLayout):
        out["date"] = layout.date.isoformat()
        out["column"] = _column(layout.column)
    elif isinstance(layout, WeekLayout):
        out.update(
            {
                "start": layout.start.isoformat(),
                "end": layout.end.isoformat(),
                "expanded": layout.expanded,
                "trackCount": layout.track_count,
                "hiddenBarCount": layout.hidden_bar_count,
                "bars": [_bar(b) for b in layout.bars],
                "columns": [_column(c) for c in layout.columns],
            }
        )
    elif isinstance(layout, MonthLayout):
        out.update(
            {
                "year": layout.year,
                "month": layout.month,
                "weeks": [
                    {
                        "start": w.start.isoformat(),
                        "trackCount": w.track_count,
                        "bars": [_bar(b) for b in w.bars],
                        "cells": [
                            {
                                "date": c.date.isoformat(),
                                "isCurrentMonth": c.is_current_month,
                                "isToday": c.is_today,
                                "isPast": c.is_past,
                                "eventIds": _ids(c.events),
                                "overflow": c.overflow,
                                "eventCount": c.event_count,
                            }
                            for c in w.cells
                        ],
                    }
                    for w in layout.weeks
                ],
            }
        )
    else:
        raise TypeError(f"unsupported layout type: {type(layout).__name__}")
    out["events"] = _events_index(layout)
    return out


def dumps_json(data: Any, *, pretty: bool = False) -> str:
    if orjson is not None:
        opts = orjson.OPT_INDENT_2 if pretty else 0
        return orjson.dumps(data, option=opts).decode("utf-8")
    if pretty:
        return json.dumps(data, ensure_ascii=False, indent=2)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def dumps_layout(layout: Layout, *, pretty: bool = False) -> str:
    return dumps_json(layout_to_dict(layout), pretty=pretty)
