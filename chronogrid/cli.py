from __future__ import annotations

import argparse
import datetime as dt
import json
import os
import sys
from pathlib import Path

from .compose import ViewComposer
from .config import load_config
from .export import dumps_layout
from .model import VIEWS
from .normalize import normalize_events
from .util.timeparse import parse_date_yyyy_mm_dd
from .util.tz import fixed_clock, system_clock
from .validate import ConfigValidationError


def _read_records(path: str) -> list:
    try:
        if path == "-":
            data = json.load(sys.stdin)
        else:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SystemExit(f"[chronogrid] ERROR: input not found: {path}")
    except json.JSONDecodeError as e:
        raise SystemExit(f"[chronogrid] ERROR: input is not valid JSON: {e}")
    # Accept a bare list or the common {"data": [...]} envelope.
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        data = data["data"]
    if not isinstance(data, list):
        raise SystemExit("[chronogrid] ERROR: input must be a JSON list of event records")
    return data


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        description="Compose a day/week/month calendar layout from event records and print it as JSON."
    )
    ap.add_argument("--in", dest="inp", required=True, help="Event records JSON file ('-' for stdin)")
    ap.add_argument("--view", choices=VIEWS, default="week", help="View to compose (default: week)")
    ap.add_argument("--date", default=None, help="Reference date YYYY-MM-DD (default: today)")
    ap.add_argument(
        "--config",
        default=os.getenv("CHRONOGRID_CONFIG") or None,
        help="Config JSON (default: env CHRONOGRID_CONFIG, else built-in defaults)",
    )
    ap.add_argument("--now", default=None, help="Pin the clock, e.g. 2024-06-01T09:00 (tests, reproducible output)")
    ap.add_argument("--expanded", action="store_true", help="Week view: show every multi-day bar")
    ap.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    ap.add_argument("--out", default=None, help="Output path (default: stdout)")

    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except ConfigValidationError as e:
        raise SystemExit(f"[chronogrid] ERROR: invalid config: {e}")

    clock = system_clock
    if args.now:
        try:
            clock = fixed_clock(dt.datetime.fromisoformat(args.now))
        except ValueError:
            raise SystemExit(f"[chronogrid] ERROR: --now must be ISO datetime, got {args.now!r}")

    if args.date:
        try:
            ref = parse_date_yyyy_mm_dd(args.date)
        except ValueError:
            raise SystemExit(f"[chronogrid] ERROR: --date must be YYYY-MM-DD, got {args.date!r}")
    else:
        ref = clock().date()

    composer = ViewComposer(cfg, clock=clock)
    composer.set_events(normalize_events(_read_records(args.inp)))
    text = dumps_layout(composer.compose(args.view, ref, expanded=args.expanded), pretty=args.pretty)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
        print(str(out_path.resolve()))
    else:
        sys.stdout.write(text + "\n")


if __name__ == "__main__":
    main()
