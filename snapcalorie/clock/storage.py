# -*- coding: utf-8 -*-
"""Clock — persistence of the (offset, count, last real date) triple."""

from __future__ import annotations

import logging
from typing import Optional

from ..store import KeyValueStore
from .calendar import GMT_OFFSET_HOURS, parse_day_key
from .models import VirtualClockState

logger = logging.getLogger(__name__)

DAY_OFFSET_KEY = "snapcalorie_day_offset"
DAY_COUNT_KEY = "snapcalorie_day_count"
LAST_REAL_DATE_KEY = "snapcalorie_last_real_date"


def _load_int(store: KeyValueStore, key: str, minimum: int) -> Optional[int]:
    raw = store.load(key)
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Stored value for %s is not an integer: %r", key, raw)
        return None
    if value < minimum:
        logger.warning("Stored value for %s is below %d: %d", key, minimum, value)
        return None
    return value


def _load_date(store: KeyValueStore, key: str) -> Optional[str]:
    raw = store.load(key)
    if raw is None:
        return None
    value = raw.strip()
    try:
        parse_day_key(value)
    except ValueError:
        logger.warning("Stored value for %s is not a date: %r", key, raw)
        return None
    return value


class ClockStore:
    def __init__(self, store: KeyValueStore, offset_hours: float = GMT_OFFSET_HOURS) -> None:
        self.store = store
        self.offset_hours = offset_hours

    def load(self, real_now_ms: int) -> VirtualClockState:
        """Load the saved state; any missing piece falls back to its first-run default."""
        default = VirtualClockState.initial(real_now_ms, self.offset_hours)
        day_offset = _load_int(self.store, DAY_OFFSET_KEY, minimum=0)
        day_count = _load_int(self.store, DAY_COUNT_KEY, minimum=1)
        last_date = _load_date(self.store, LAST_REAL_DATE_KEY)
        return VirtualClockState(
            day_offset=default.day_offset if day_offset is None else day_offset,
            day_count=default.day_count if day_count is None else day_count,
            last_observed_real_date=last_date or default.last_observed_real_date,
        )

    def save(self, state: VirtualClockState) -> None:
        self.store.save(DAY_OFFSET_KEY, str(state.day_offset))
        self.store.save(DAY_COUNT_KEY, str(state.day_count))
        self.store.save(LAST_REAL_DATE_KEY, state.last_observed_real_date)
