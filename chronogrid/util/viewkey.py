# chronogrid/util/viewkey.py
from __future__ import annotations

import datetime as dt


def make_view_key(
    view: str,
    ref_date: dt.date,
    hour_start: float,
    hour_end: float,
    px_per_hour: float,
    header_px: float,
    generation: int,
    expanded: bool = False,
) -> str:
    """Return a stable key for memoizing a composed layout.

    The key is cheap and deterministic. It includes the event-set generation
    so replacing the events never reuses a stale layout.
    """
    raw = (
        f"{view}|{ref_date.isoformat()}|{hour_start}|{hour_end}|{px_per_hour}|"
        f"{header_px}|{generation}|{int(bool(expanded))}"
    )
    h = 0
    for ch in raw:
        h = (h * 131 + ord(ch)) & 0xFFFFFFFF
    return f"{h:08x}"
