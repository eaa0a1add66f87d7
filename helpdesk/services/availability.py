"""Time-of-day availability checks for technicians."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable

AVAILABILITY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DEFAULT_TOLERANCE_MINUTES = 30


def to_minutes(value: str) -> int:
    """``"HH:MM"`` -> minutes since midnight."""
    match = AVAILABILITY_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid time slot {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def clock_minutes(now: datetime) -> int:
    return now.hour * 60 + now.minute


def format_clock(now: datetime) -> str:
    return f"{now.hour:02d}:{now.minute:02d}"


def is_available_now(
    slots: Iterable[str],
    now: datetime,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> bool:
    """True when any slot lies within ``tolerance_minutes`` of ``now`` (inclusive).

    Only the wall-clock minute of ``now`` matters. There is no wraparound at
    midnight: a 23:50 slot does not cover 00:05.
    """
    current = clock_minutes(now)
    return any(abs(to_minutes(slot) - current) <= tolerance_minutes for slot in slots)
