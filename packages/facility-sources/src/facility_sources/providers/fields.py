from __future__ import annotations

from typing import Any

from geo_engine.models import GeoPoint


def pick(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return None


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def to_int(value: Any) -> int:
    """Absent or garbled numbers become 0 so downstream arithmetic stays safe."""
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def to_float_or_none(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_point(lat: Any, lng: Any) -> GeoPoint | None:
    lat_value = to_float_or_none(lat)
    lng_value = to_float_or_none(lng)
    if lat_value is None or lng_value is None:
        return None
    point = GeoPoint(lat=lat_value, lng=lng_value)
    return point if point.is_valid() else None


def format_board_timestamp(value: Any) -> str:
    """``20260118103000`` -> ``2026-01-18 10:30:00``; other shapes pass through."""
    text = to_str(value)
    if len(text) == 14 and text.isdigit():
        return f"{text[0:4]}-{text[4:6]}-{text[6:8]} {text[8:10]}:{text[10:12]}:{text[12:14]}"
    return text
