# chronogrid/config.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .model import CalendarConfig, ViewportSpec
from .util.console import eprint, obs_enabled
from .util.timeparse import parse_workhours
from .validate import ConfigValidationError, assert_valid_config

DEFAULT_CFG: Dict[str, Any] = {
    "day_start_hour": 7,
    "day_end_hour": 22,
    "px_per_hour": 64,
    "week_header_px": 174,
    "snap_min": 15,
    "min_drag_min": 15,
    "scroll_zone_px": 100,
    "scroll_step_px": 8,
    "scroll_interval_ms": 16,
    "lane_stride_px": 60,
    "max_lane_offset_px": 180,
    "month_cell_max_events": 3,
    "week_multiday_visible": 2,
    "fetch_debounce_ms": 400,
    "min_event_height_px": 20,
}

ENV_WORKHOURS = "CHRONOGRID_WORKHOURS"
ENV_PX_PER_HOUR = "CHRONOGRID_PX_PER_HOUR"


def default_config() -> CalendarConfig:
    return dict(DEFAULT_CFG)


def _apply_env(cfg: Dict[str, Any], env: Mapping[str, str]) -> None:
    wh = (env.get(ENV_WORKHOURS) or "").strip()
    if wh:
        try:
            cfg["day_start_hour"], cfg["day_end_hour"] = parse_workhours(wh)
        except ValueError as e:
            raise ConfigValidationError(f"{ENV_WORKHOURS}: {e}") from e

    pph = (env.get(ENV_PX_PER_HOUR) or "").strip()
    if pph:
        try:
            cfg["px_per_hour"] = float(pph)
        except ValueError as e:
            raise ConfigValidationError(f"{ENV_PX_PER_HOUR} must be a number, got {pph!r}") from e


def load_config(path: Optional[str] = None, *, env: Optional[Mapping[str, str]] = None) -> CalendarConfig:
    """Defaults, then the JSON file at ``path`` (if given), then environment.

    Unknown keys in the file are ignored. The merged result is validated.
    """
    cfg = default_config()

    if path:
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigValidationError(f"config file not found: {p}") from e
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"config file is not valid JSON: {p}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError(f"config file must contain a JSON object: {p}")
        for k, v in data.items():
            if k not in DEFAULT_CFG:
                if obs_enabled():
                    eprint(f"[chronogrid.config] WARN: ignoring unknown key {k!r}")
                continue
            cfg[k] = v

    _apply_env(cfg, os.environ if env is None else env)
    assert_valid_config(cfg)
    return cfg


def viewport_from_cfg(cfg: Mapping[str, Any], view: str) -> ViewportSpec:
    """Viewport for ``view``; only the week grid carries the sticky header offset."""
    return ViewportSpec(
        visible_hour_start=float(cfg.get("day_start_hour", DEFAULT_CFG["day_start_hour"])),
        visible_hour_end=float(cfg.get("day_end_hour", DEFAULT_CFG["day_end_hour"])),
        pixels_per_hour=float(cfg.get("px_per_hour", DEFAULT_CFG["px_per_hour"])),
        header_offset_px=float(cfg.get("week_header_px", DEFAULT_CFG["week_header_px"])) if view == "week" else 0.0,
    )


__all__ = [
    "DEFAULT_CFG",
    "ENV_PX_PER_HOUR",
    "ENV_WORKHOURS",
    "default_config",
    "load_config",
    "viewport_from_cfg",
]
