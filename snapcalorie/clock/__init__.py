# -*- coding: utf-8 -*-
"""Virtual day clock.

The logical "today" can run ahead of the real civil day when the user ends a
day early; real midnights then absorb that advance one day at a time.
"""

from .calendar import day_key, next_boundary_ms, now_ms
from .machine import current_day_key, end_day_now, reconcile, reset, virtual_now_ms
from .models import VirtualClockState

__all__ = [
    "VirtualClockState",
    "current_day_key",
    "day_key",
    "end_day_now",
    "next_boundary_ms",
    "now_ms",
    "reconcile",
    "reset",
    "virtual_now_ms",
]
