# chronogrid/normalize.py
"""Raw event records -> canonical ``Event``.

Backends disagree on field names (``startTime`` / ``start_time`` /
``starttime``), on date shapes and on how attendees are encoded. All of that
is resolved here, once, through ``FIELD_ALIASES``. Nothing in this module
raises on bad data; unusable values degrade to ``""``.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .model import Event
from .util.console import eprint, obs_enabled
from .util.timeparse import normalize_date_to_midnight

# canonical field -> source keys, tried in order (camelCase, snake_case, others)
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "_id", "eventId", "event_id"),
    "title": ("title", "name", "subject"),
    "date": ("date", "startDate", "start_date", "startdate"),
    "end_date": ("endDate", "end_date", "enddate"),
    "start_time": ("startTime", "start_time", "starttime", "start_Time"),
    "end_time": ("endTime", "end_time", "endtime", "end_Time"),
    "eventtype": ("eventtype", "eventType", "event_type"),
    "subtype": ("subtype", "subType", "sub_type"),
    "mode": ("mode",),
    "agenda": ("agenda", "description"),
    "link": ("link", "meetingLink", "meeting_link"),
    "priority": ("priority",),
    "employees": ("employees", "attendees"),
    "event_status": ("eventStatus", "event_status", "eventstatus"),
    "form_type": ("formType", "form_type", "formtype"),
    "employee_id": ("employeeID", "employeeId", "employee_id", "employeeid"),
    "day": ("day",),
    "audience": ("audience",),
    "remarks": ("remarks",),
    "created_at": ("createdAt", "created_at"),
    "updated_at": ("updatedAt", "updated_at"),
}

_EMPLOYEE_ID_KEYS = ("employee_id", "employeeId", "employeeID", "_id", "id")

MEETING_LIKE_TYPES = frozenset(
    {
        "meeting",
        "quotation",
        "invoice",
        "payment following",
        "paymentfollowing",
        "payment_following",
        "client following",
        "clientfollowing",
        "client_following",
        "projectdiscuss",
        "project_discuss",
        "personal",
    }
)

PRIORITIES = ("High", "Medium", "Low")

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_YMD_SLASH_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_EPOCH_MS_RE = re.compile(r"^\d{11,14}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?::\d{1,2}(?:\.\d+)?)?\s*([AaPp][Mm])?$")


def _warn(msg: str) -> None:
    if obs_enabled():
        eprint(f"[chronogrid.normalize] WARN: {msg}")


def _pick(raw: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_ALIASES[field]:
        v = raw.get(key)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def _text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def _ymd(y: int, m: int, d: int) -> str:
    try:
        return dt.date(y, m, d).isoformat()
    except ValueError:
        return ""


def coerce_date(value: Any) -> str:
    """Best-effort ``YYYY-MM-DD``; ``""`` when the value is not a date.

    Datetime strings keep the calendar date as written (no timezone shift).
    Bare integers are epoch milliseconds, read in UTC.
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (dt.date, dt.datetime)):
        return normalize_date_to_midnight(value).isoformat()
    if isinstance(value, (int, float)):
        try:
            return dt.datetime.fromtimestamp(value / 1000, tz=dt.timezone.utc).date().isoformat()
        except (OverflowError, OSError, ValueError):
            return ""

    s = str(value).strip()
    if not s:
        return ""
    m = _ISO_DATE_RE.match(s)
    if m:
        return _ymd(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    m = _US_DATE_RE.match(s)
    if m:
        return _ymd(int(m.group(3)), int(m.group(1)), int(m.group(2)))
    m = _YMD_SLASH_RE.match(s)
    if m:
        return _ymd(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    if _EPOCH_MS_RE.match(s):
        return coerce_date(int(s))
    return ""


def coerce_time(value: Any) -> str:
    """Best-effort zero-padded ``HH:MM``; seconds are dropped.

    ``"9:5"`` -> ``"09:05"``, ``"2:30 PM"`` -> ``"14:30"``. ``"24:00"`` is kept
    as an end-of-day marker.
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, dt.datetime):
        return f"{value.hour:02d}:{value.minute:02d}"
    if isinstance(value, dt.time):
        return f"{value.hour:02d}:{value.minute:02d}"

    s = str(value).strip()
    if "T" in s:
        s = s.split("T", 1)[1]
        s = re.split(r"[Zz+-]", s, maxsplit=1)[0]
    m = _TIME_RE.match(s)
    if not m:
        return ""
    hh = int(m.group(1))
    mm = int(m.group(2))
    ampm = (m.group(3) or "").upper()
    if mm > 59:
        return ""
    if ampm:
        if not 1 <= hh <= 12:
            return ""
        if ampm == "AM":
            hh = 0 if hh == 12 else hh
        else:
            hh = hh if hh == 12 else hh + 12
    if hh == 24 and mm == 0:
        return "24:00"
    if hh > 23:
        return ""
    return f"{hh:02d}:{mm:02d}"


def coerce_employees(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    out: List[str] = []
    seen = set()
    for item in value:
        ident: Any = None
        if isinstance(item, bool):
            continue
        if isinstance(item, (str, int, float)):
            ident = item
        elif isinstance(item, Mapping):
            for k in _EMPLOYEE_ID_KEYS:
                if item.get(k) not in (None, ""):
                    ident = item[k]
                    break
        s = _text(ident)
        if not s or s in seen:
            continue
        seen.add(s)
        out.append(s)
    return tuple(out)


def normalize_priority(value: Any) -> str:
    s = _text(value).lower()
    for p in PRIORITIES:
        if s == p.lower():
            return p
    return ""


def is_meeting_like(event: Event) -> bool:
    """Types that carry attendees and a meeting link."""
    return event.eventtype.strip().lower() in MEETING_LIKE_TYPES


def derive_status(event: Event, today: dt.date) -> str:
    status = event.event_status.strip()
    if status in ("Completed", "Cancelled"):
        return status
    try:
        day = normalize_date_to_midnight(event.date)
    except ValueError:
        return "Pending"
    if day < today:
        return "Missed"
    return "Pending"


def normalize_with_issues(raw: Any, fallback_id: str = "") -> Tuple[Optional[Event], List[str]]:
    """Normalize one record and list what had to be degraded."""
    if not isinstance(raw, Mapping):
        return None, [f"record is {type(raw).__name__}, not an object"]

    issues: List[str] = []

    ev_id = _text(_pick(raw, "id")) or fallback_id
    if not _text(_pick(raw, "id")):
        issues.append("missing id")

    raw_date = _pick(raw, "date")
    date = coerce_date(raw_date)
    if not date:
        issues.append(f"unparseable date {raw_date!r}")

    raw_end = _pick(raw, "end_date")
    end_date = coerce_date(raw_end) if raw_end is not None else ""
    if raw_end is not None and not end_date:
        issues.append(f"unparseable endDate {raw_end!r}")
    if not end_date or (date and end_date < date):
        if end_date and date and end_date < date:
            issues.append(f"endDate {end_date} before date {date}")
        end_date = date

    times: Dict[str, str] = {}
    for field, label in (("start_time", "startTime"), ("end_time", "endTime")):
        v = _pick(raw, field)
        times[field] = coerce_time(v) if v is not None else ""
        if v is not None and not times[field]:
            issues.append(f"unparseable {label} {v!r}")

    emp_src = _pick(raw, "employees")
    employees = coerce_employees(emp_src)
    if emp_src is not None and not isinstance(emp_src, (list, tuple)):
        issues.append("employees is not a list")

    ev = Event(
        id=ev_id,
        title=_text(_pick(raw, "title")),
        date=date,
        end_date=end_date,
        start_time=times["start_time"],
        end_time=times["end_time"],
        eventtype=_text(_pick(raw, "eventtype")),
        subtype=_text(_pick(raw, "subtype")),
        mode=_text(_pick(raw, "mode")),
        agenda=_text(_pick(raw, "agenda")),
        link=_text(_pick(raw, "link")),
        priority=normalize_priority(_pick(raw, "priority")),
        employees=employees,
        event_status=_text(_pick(raw, "event_status")),
        form_type=_text(_pick(raw, "form_type")).lower(),
        employee_id=_text(_pick(raw, "employee_id")),
        day=_text(_pick(raw, "day")) or "workingday",
        audience=_text(_pick(raw, "audience")),
        remarks=_text(_pick(raw, "remarks")),
        created_at=_text(_pick(raw, "created_at")),
        updated_at=_text(_pick(raw, "updated_at")),
        raw=dict(raw),
    )
    return ev, issues


def normalize_event(raw: Any, fallback_id: str = "") -> Optional[Event]:
    """Canonical ``Event`` for one raw record; None for non-object input."""
    ev, issues = normalize_with_issues(raw, fallback_id)
    for msg in issues:
        _warn(f"{ev.id if ev is not None else '?'}: {msg}")
    return ev


def normalize_events(raws: Iterable[Any]) -> List[Event]:
    """Normalize a fetched list; records without an id get ``_anon:<index>``."""
    out: List[Event] = []
    for i, raw in enumerate(raws or []):
        ev = normalize_event(raw, fallback_id=f"_anon:{i}")
        if ev is not None:
            out.append(ev)
    return out
