#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List

from chronogrid.normalize import normalize_with_issues


def _die(msg: str, rc: int = 2) -> int:
    print(f"[chronogrid-validate-events] ERROR: {msg}", file=sys.stderr)
    return rc


def _load_records(p: Path) -> List[Any]:
    obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    if isinstance(obj, dict) and isinstance(obj.get("data"), list):
        obj = obj["data"]
    if not isinstance(obj, list):
        raise ValueError(f"events must be a JSON list; got {type(obj).__name__}")
    return obj


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="chronogrid-validate-events",
        description=(
            "Report event records that lose information during normalization\n"
            "(unparseable dates/times, missing ids, clamped end dates)."
        ),
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Event records JSON path")
    ap.add_argument("--strict", action="store_true", help="Exit non-zero when any record degrades")
    ns = ap.parse_args(argv)

    p = Path(ns.in_json)
    if not p.exists():
        return _die(f"Missing JSON file: {p}")
    try:
        records = _load_records(p)
    except Exception as e:
        return _die(f"Failed to load events: {p} ({e})")

    problems: List[str] = []
    for i, raw in enumerate(records):
        ev, issues = normalize_with_issues(raw, fallback_id=f"_anon:{i}")
        label = ev.id if ev is not None else f"#{i}"
        problems.extend(f"[{i}] {label}: {msg}" for msg in issues)

    if problems:
        stream = sys.stderr if ns.strict else sys.stdout
        print(f"[chronogrid-validate-events] WARN: {len(problems)} issue(s) in {len(records)} record(s)", file=stream)
        for msg in problems:
            print(f"  - {msg}", file=stream)
        return 3 if ns.strict else 0

    print(f"[chronogrid-validate-events] OK ({len(records)} records)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
