# -*- coding: utf-8 -*-
"""Clock — pure state transitions.

Every transition maps ``(state, real_now_ms)`` to a new state and leaves the
input untouched, so the periodic ticker and the tests drive the same code.
"""

from __future__ import annotations

from .calendar import GMT_OFFSET_HOURS, MS_PER_DAY, day_key, days_between
from .models import VirtualClockState


def reconcile(
    state: VirtualClockState,
    real_now_ms: int,
    offset_hours: float = GMT_OFFSET_HOURS,
) -> VirtualClockState:
    """Catch the clock up with the real civil day.

    Each real boundary crossed since ``last_observed_real_date`` first absorbs
    one day of pending manual advance; only when none is pending does it count
    as a natural rollover and bump ``day_count``. Several missed boundaries are
    applied one by one.
    """
    today = day_key(real_now_ms, offset_hours)
    if today == state.last_observed_real_date:
        return state

    crossed = max(0, days_between(state.last_observed_real_date, today))
    absorbed = min(crossed, state.day_offset)
    return state.model_copy(
        update={
            "last_observed_real_date": today,
            "day_offset": state.day_offset - absorbed,
            "day_count": state.day_count + (crossed - absorbed),
        }
    )


def end_day_now(state: VirtualClockState) -> VirtualClockState:
    """Close the logical day before real midnight."""
    return state.model_copy(
        update={
            "day_offset": state.day_offset + 1,
            "day_count": state.day_count + 1,
        }
    )


def reset(real_now_ms: int, offset_hours: float = GMT_OFFSET_HOURS) -> VirtualClockState:
    return VirtualClockState.initial(real_now_ms, offset_hours)


def virtual_now_ms(state: VirtualClockState, real_now_ms: int) -> int:
    """Timestamp stamped on new events. Never shown as wall-clock time."""
    return real_now_ms + state.day_offset * MS_PER_DAY


def current_day_key(
    state: VirtualClockState,
    real_now_ms: int,
    offset_hours: float = GMT_OFFSET_HOURS,
) -> str:
    return day_key(virtual_now_ms(state, real_now_ms), offset_hours)
