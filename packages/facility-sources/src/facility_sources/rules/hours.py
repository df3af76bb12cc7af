"""Open/closed evaluation from upstream ``HHMM`` operating-hour strings.

Overnight ranges (end earlier than start, e.g. ``2200``-``0600``) are not handled
and always evaluate as closed. Upstream data for 24-hour facilities uses
``0000``-``2400`` which evaluates correctly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from devkit.timezone import now_kst, to_kst


@dataclass(frozen=True)
class OperatingStatus:
    is_open: bool
    closing_time: str | None


CLOSED = OperatingStatus(is_open=False, closing_time=None)


def normalize_time(value: str) -> str:
    return value.replace(":", "").strip().rjust(4, "0")


def to_minutes(value: str) -> int | None:
    normalized = normalize_time(value)
    hour, minute = normalized[0:2], normalized[2:4]
    if not (hour.isdigit() and minute.isdigit()):
        return None
    return int(hour) * 60 + int(minute)


def format_clock(value: str) -> str:
    normalized = normalize_time(value)
    return f"{normalized[0:2]}:{normalized[2:4]}"


def evaluate_operating_status(
    start_time: str | None,
    end_time: str | None,
    now: datetime | None = None,
) -> OperatingStatus:
    if not start_time or not end_time:
        return CLOSED
    start_minutes = to_minutes(start_time)
    end_minutes = to_minutes(end_time)
    if start_minutes is None or end_minutes is None:
        return CLOSED

    current = to_kst(now) if now is not None else now_kst()
    now_minutes = current.hour * 60 + current.minute
    if start_minutes <= now_minutes < end_minutes:
        return OperatingStatus(is_open=True, closing_time=format_clock(end_time))
    return CLOSED
