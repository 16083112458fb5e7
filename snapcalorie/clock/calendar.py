# -*- coding: utf-8 -*-
"""Civil-day bucketing at a fixed UTC offset.

Timestamps are integer epoch milliseconds. A day key is the ``YYYY-MM-DD``
civil date at ``offset_hours`` east of UTC; it never depends on the host's
local timezone.
"""

from __future__ import annotations

import time
from datetime import date, timedelta
from typing import List

MS_PER_DAY = 86_400_000
MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000

GMT_OFFSET_HOURS = 3

_EPOCH = date(1970, 1, 1)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def _offset_ms(offset_hours: float) -> int:
    return int(round(offset_hours * MS_PER_HOUR))


def _civil_day_number(timestamp_ms: int, offset_hours: float) -> int:
    # Floor division keeps pre-epoch timestamps on the right side of midnight.
    return (int(timestamp_ms) + _offset_ms(offset_hours)) // MS_PER_DAY


def day_key(timestamp_ms: int, offset_hours: float = GMT_OFFSET_HOURS) -> str:
    """Return the civil date (``YYYY-MM-DD``) containing ``timestamp_ms``."""
    return (_EPOCH + timedelta(days=_civil_day_number(timestamp_ms, offset_hours))).isoformat()


def start_of_day_ms(timestamp_ms: int, offset_hours: float = GMT_OFFSET_HOURS) -> int:
    """UTC milliseconds of the civil midnight that opens the timestamp's day."""
    return _civil_day_number(timestamp_ms, offset_hours) * MS_PER_DAY - _offset_ms(offset_hours)


def next_boundary_ms(real_now_ms: int, offset_hours: float = GMT_OFFSET_HOURS) -> int:
    """The upcoming real civil midnight. Always computed from real time."""
    return start_of_day_ms(real_now_ms, offset_hours) + MS_PER_DAY


def parse_day_key(key: str) -> date:
    return date.fromisoformat(key)


def shift_day_key(key: str, days: int) -> str:
    return (parse_day_key(key) + timedelta(days=days)).isoformat()


def days_between(start_key: str, end_key: str) -> int:
    """Signed number of civil days from ``start_key`` to ``end_key``."""
    return (parse_day_key(end_key) - parse_day_key(start_key)).days


def day_keys_ending(end_key: str, count: int) -> List[str]:
    """``count`` consecutive day keys ending at ``end_key``, oldest first."""
    return [shift_day_key(end_key, -i) for i in range(count - 1, -1, -1)]


def format_time_left(real_now_ms: int, boundary_ms: int) -> str:
    diff = boundary_ms - real_now_ms
    if diff <= 0:
        return "0h 0m"
    hours = diff // MS_PER_HOUR
    minutes = (diff % MS_PER_HOUR) // MS_PER_MINUTE
    return f"{hours}h {minutes}m"
