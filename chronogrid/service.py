# chronogrid/service.py
"""Event API boundary and fetch coordination.

The engine never talks to a backend directly. ``EventFeed`` asks an
``EventReadApi`` for the records behind the current view, debounced per
view/date change, and keeps only the response for the latest request.
Writes go through an ``EventWriteApi`` and only in response to intents.
"""

from __future__ import annotations

import datetime as dt
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from .compose import ViewComposer, month_grid, week_days
from .model import VIEWS, CreateIntent, Event
from .normalize import normalize_events
from .timers import Scheduler
from .util.console import eprint, obs_enabled
from .util.timeparse import normalize_date_to_midnight

DEFAULT_DEBOUNCE_S = 0.4

FetchKey = Tuple[str, str, str]


class EventReadApi(Protocol):
    def list_all(self) -> Sequence[Mapping[str, Any]]:
        ...

    def list_by_date(self, date: str) -> Sequence[Mapping[str, Any]]:
        ...

    def list_by_range(self, start: str, end: str) -> Sequence[Mapping[str, Any]]:
        ...


class EventWriteApi(Protocol):
    def create(self, fields: Mapping[str, Any]) -> Any:
        ...

    def update(self, event_id: str, fields: Mapping[str, Any]) -> Any:
        ...

    def delete(self, event_id: str) -> Any:
        ...


def _obs(msg: str) -> None:
    if obs_enabled():
        eprint(f"[chronogrid.service] {msg}")


def view_range(view: str, ref: dt.date) -> Tuple[dt.date, dt.date]:
    """Inclusive date range a view needs events for."""
    ref = normalize_date_to_midnight(ref)
    if view == "day":
        return ref, ref
    if view == "week":
        days = week_days(ref)
        return days[0], days[-1]
    if view == "month":
        grid = month_grid(ref.year, ref.month)
        return grid[0], grid[-1]
    raise ValueError(f"unknown view {view!r} (expected one of {', '.join(VIEWS)})")


def fetch_key(view: str, ref: dt.date) -> FetchKey:
    start, end = view_range(view, ref)
    return view, start.isoformat(), end.isoformat()


class EventFeed:
    """Debounced, latest-wins loader for the canonical event list."""

    def __init__(
        self,
        read_api: EventReadApi,
        *,
        scheduler: Scheduler,
        write_api: Optional[EventWriteApi] = None,
        composer: Optional[ViewComposer] = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        on_update: Optional[Callable[[Tuple[Event, ...]], None]] = None,
    ) -> None:
        self._read = read_api
        self._write = write_api
        self._scheduler = scheduler
        self._composer = composer
        self.debounce_s = float(debounce_s)
        self._on_update = on_update

        self._lock = threading.RLock()
        self._pending: Any = None
        self._latest: Optional[FetchKey] = None
        self._events: Tuple[Event, ...] = ()
        self.last_error: Optional[BaseException] = None
        self.stale_discards = 0

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    @property
    def latest_key(self) -> Optional[FetchKey]:
        return self._latest

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request(self, view: str, ref: dt.date) -> FetchKey:
        """Note a view/date change; the fetch runs after the debounce delay."""
        key = fetch_key(view, ref)
        with self._lock:
            self._scheduler.cancel(self._pending)
            self._latest = key
            self._pending = self._scheduler.call_later(self.debounce_s, lambda: self._fire(key))
        return key

    def flush(self) -> None:
        """Run a pending fetch now instead of waiting for the timer."""
        with self._lock:
            if self._pending is None or self._latest is None:
                return
            key = self._latest
        self._fire(key)

    def refresh(self) -> None:
        """Re-fetch the latest range immediately (after a write)."""
        if self._latest is not None:
            self._fire(self._latest)

    def _fire(self, key: FetchKey) -> None:
        with self._lock:
            if key != self._latest:
                # Superseded after its timer fired; the newer fetch stays pending.
                _obs(f"superseded fetch skipped key={key} latest={self._latest}")
                return
            self._scheduler.cancel(self._pending)
            self._pending = None
        try:
            raws = self._fetch(key)
        except Exception as e:
            # Keep the previous events; the next request retries.
            self.last_error = e
            eprint(f"[chronogrid.service] WARN: fetch {key[0]} {key[1]}..{key[2]} failed: {e}")
            return
        self.accept(key, raws)

    def _fetch(self, key: FetchKey) -> Sequence[Mapping[str, Any]]:
        view, start, end = key
        if view == "day":
            return self._read.list_by_date(start)
        return self._read.list_by_range(start, end)

    def accept(self, key: FetchKey, raws: Sequence[Any]) -> bool:
        """Install a response if it answers the latest request."""
        with self._lock:
            if key != self._latest:
                self.stale_discards += 1
                _obs(f"stale response discarded key={key} latest={self._latest}")
                return False
            events = tuple(normalize_events(raws))
            self._events = events
            self.last_error = None
            if self._composer is not None:
                self._composer.set_events(events)
        _obs(f"events replaced key={key} count={len(events)}")
        if self._on_update is not None:
            self._on_update(events)
        return True

    def _writer(self) -> EventWriteApi:
        if self._write is None:
            raise RuntimeError("EventFeed has no write api")
        return self._write

    def create_from_intent(self, intent: CreateIntent, fields: Optional[Mapping[str, Any]] = None) -> Any:
        payload: Dict[str, Any] = intent.to_record()
        if fields:
            payload.update(fields)
        result = self._writer().create(payload)
        self.refresh()
        return result

    def update_event(self, event_id: str, fields: Mapping[str, Any]) -> Any:
        result = self._writer().update(event_id, dict(fields))
        self.refresh()
        return result

    def delete_event(self, event_id: str) -> Any:
        result = self._writer().delete(event_id)
        self.refresh()
        return result

    def close(self) -> None:
        with self._lock:
            self._scheduler.cancel(self._pending)
            self._pending = None


class InMemoryEventApi:
    """Read/write api over a list of raw records (CLI and tests)."""

    def __init__(self, records: Optional[List[Mapping[str, Any]]] = None) -> None:
        self._records: List[Dict[str, Any]] = [dict(r) for r in (records or []) if isinstance(r, Mapping)]
        self._next_id = 1

    def list_all(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._records]

    def list_by_date(self, date: str) -> List[Dict[str, Any]]:
        return self.list_by_range(date, date)

    def list_by_range(self, start: str, end: str) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for ev in normalize_events(self._records):
            if not ev.date:
                continue
            if ev.date <= end and (ev.end_date or ev.date) >= start:
                out.append(dict(ev.raw))
        return out

    def create(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        rec = dict(fields)
        if not rec.get("id"):
            while any(str(r.get("id")) == str(self._next_id) for r in self._records):
                self._next_id += 1
            rec["id"] = str(self._next_id)
            self._next_id += 1
        self._records.append(rec)
        return dict(rec)

    def _index(self, event_id: str) -> int:
        for i, r in enumerate(self._records):
            if str(r.get("id") or r.get("_id") or "") == str(event_id):
                return i
        raise KeyError(event_id)

    def update(self, event_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        i = self._index(event_id)
        self._records[i].update(fields)
        return dict(self._records[i])

    def delete(self, event_id: str) -> None:
        del self._records[self._index(event_id)]
