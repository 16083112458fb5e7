# -*- coding: utf-8 -*-
"""Clock — Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .calendar import GMT_OFFSET_HOURS, day_key


class VirtualClockState(BaseModel):
    model_config = ConfigDict(frozen=True)

    day_offset: int = Field(0, ge=0, description="Days of manual advance not yet absorbed by real time")
    day_count: int = Field(1, ge=1, description="Display counter, 'Day N'")
    last_observed_real_date: str = Field(..., description="YYYY-MM-DD, last reconciled real civil day")

    @classmethod
    def initial(cls, real_now_ms: int, offset_hours: float = GMT_OFFSET_HOURS) -> "VirtualClockState":
        return cls(day_offset=0, day_count=1, last_observed_real_date=day_key(real_now_ms, offset_hours))


class ClockStatus(BaseModel):
    day_offset: int
    day_count: int
    last_observed_real_date: str
    virtual_date: str
    real_date: str
    next_midnight: int = Field(..., description="Epoch ms of the next real civil midnight")
    time_left: str
