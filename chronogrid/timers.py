# chronogrid/timers.py
"""Timer boundary for the interaction engine.

The engine never creates threads or event-loop callbacks directly; it asks a
``Scheduler`` for one-shot (debounce) and periodic (auto-scroll) callbacks and
always hands the returned handle back to ``cancel``.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Protocol


class Scheduler(Protocol):
    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Any:
        """Run ``fn`` once after ``delay_s`` seconds; return a cancel handle."""

    def call_every(self, interval_s: float, fn: Callable[[], None]) -> Any:
        """Run ``fn`` every ``interval_s`` seconds until cancelled."""

    def cancel(self, handle: Any) -> None:
        """Cancel a handle; cancelling twice or after firing is a no-op."""


class _Repeater:
    def __init__(self, interval_s: float, fn: Callable[[], None]) -> None:
        self._interval_s = interval_s
        self._fn = fn
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="chronogrid-timer", daemon=True)

    def start(self) -> "_Repeater":
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stop.wait(self._interval_s):
            self._fn()

    def cancel(self) -> None:
        self._stop.set()


class ThreadingScheduler:
    """Default scheduler backed by ``threading``.

    UI integrations normally pass their own scheduler that posts callbacks
    onto the UI thread.
    """

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> threading.Timer:
        t = threading.Timer(delay_s, fn)
        t.daemon = True
        t.start()
        return t

    def call_every(self, interval_s: float, fn: Callable[[], None]) -> _Repeater:
        return _Repeater(interval_s, fn).start()

    def cancel(self, handle: Optional[Any]) -> None:
        if handle is None:
            return
        handle.cancel()
