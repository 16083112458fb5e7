# -*- coding: utf-8 -*-
"""Clock — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..tracker import Tracker, get_tracker
from .models import ClockStatus

router = APIRouter(prefix="/api/clock", tags=["Clock"])


@router.get("", response_model=ClockStatus, summary="Current day count, virtual day and time to real midnight")
def clock_status(tracker: Tracker = Depends(get_tracker)):
    return tracker.clock_status()


@router.post("/end-day", response_model=ClockStatus, summary="End the current logical day early")
def end_day(tracker: Tracker = Depends(get_tracker)):
    try:
        tracker.end_day_now()
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save clock state: {exc}") from exc
    return tracker.clock_status()


@router.post("/reset", response_model=ClockStatus, summary="Reset the day counter to Day 1")
def reset_counter(tracker: Tracker = Depends(get_tracker)):
    try:
        tracker.reset_day_counter()
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save clock state: {exc}") from exc
    return tracker.clock_status()
