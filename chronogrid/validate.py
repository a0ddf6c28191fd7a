"""Configuration validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List

from .model import ViewportSpec


class ConfigValidationError(ValueError):
    """Raised when a calendar config fails validation."""


_INT_KEYS = (
    "day_start_hour",
    "day_end_hour",
    "snap_min",
    "min_drag_min",
    "scroll_interval_ms",
    "month_cell_max_events",
    "week_multiday_visible",
    "fetch_debounce_ms",
)

_POSITIVE_NUM_KEYS = (
    "px_per_hour",
    "scroll_zone_px",
    "scroll_step_px",
    "lane_stride_px",
    "min_event_height_px",
)

_NON_NEGATIVE_NUM_KEYS = (
    "week_header_px",
    "max_lane_offset_px",
)


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_num(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_config(cfg: Dict[str, Any], *, label: str = "cfg") -> List[str]:
    if not isinstance(cfg, dict):
        return [f"{label}: config must be a dict/object"]

    errs: List[str] = []
    for k in _INT_KEYS:
        if k in cfg:
            _require(_is_int(cfg[k]), f"{label}: {k} must be int", errs)
    for k in _POSITIVE_NUM_KEYS:
        if k in cfg:
            _require(_is_num(cfg[k]) and cfg[k] > 0, f"{label}: {k} must be a positive number", errs)
    for k in _NON_NEGATIVE_NUM_KEYS:
        if k in cfg:
            _require(_is_num(cfg[k]) and cfg[k] >= 0, f"{label}: {k} must be a non-negative number", errs)
    if errs:
        return errs

    sh = cfg.get("day_start_hour")
    eh = cfg.get("day_end_hour")
    if sh is not None:
        _require(0 <= sh <= 23, f"{label}: day_start_hour must be within 0..23", errs)
    if eh is not None:
        _require(1 <= eh <= 24, f"{label}: day_end_hour must be within 1..24", errs)
    if sh is not None and eh is not None:
        _require(sh < eh, f"{label}: day_start_hour must be before day_end_hour", errs)

    snap = cfg.get("snap_min")
    if snap is not None:
        _require(0 < snap <= 60 and 60 % snap == 0, f"{label}: snap_min must divide 60", errs)
    md = cfg.get("min_drag_min")
    if md is not None:
        _require(md >= 0, f"{label}: min_drag_min must be >= 0", errs)

    for k in ("scroll_interval_ms", "fetch_debounce_ms"):
        v = cfg.get(k)
        if v is not None:
            _require(v >= 0, f"{label}: {k} must be >= 0", errs)
    for k in ("month_cell_max_events", "week_multiday_visible"):
        v = cfg.get(k)
        if v is not None:
            _require(v >= 1, f"{label}: {k} must be >= 1", errs)

    return errs


def validate_viewport(viewport: ViewportSpec, *, label: str = "viewport") -> List[str]:
    errs: List[str] = []
    _require(
        viewport.visible_hour_start < viewport.visible_hour_end,
        f"{label}: visible_hour_start must be before visible_hour_end",
        errs,
    )
    _require(
        0 <= viewport.visible_hour_start and viewport.visible_hour_end <= 24,
        f"{label}: visible hours must lie within 0..24",
        errs,
    )
    _require(viewport.pixels_per_hour > 0, f"{label}: pixels_per_hour must be > 0", errs)
    _require(viewport.header_offset_px >= 0, f"{label}: header_offset_px must be >= 0", errs)
    return errs


def assert_valid_config(cfg: Dict[str, Any]) -> None:
    errs = validate_config(cfg, label="cfg")
    if errs:
        raise ConfigValidationError(errs[0])


def assert_valid_viewport(viewport: ViewportSpec) -> None:
    errs = validate_viewport(viewport)
    if errs:
        raise ConfigValidationError(errs[0])


__all__ = [
    "ConfigValidationError",
    "assert_valid_config",
    "assert_valid_viewport",
    "validate_config",
    "validate_viewport",
]
