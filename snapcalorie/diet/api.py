# -*- coding: utf-8 -*-
"""Diet — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import settings
from ..tracker import Tracker, get_tracker
from .models import (
    AddWaterRequest,
    Dashboard,
    DayReport,
    EstimateMealRequest,
    EstimationStatus,
    LoggedMeal,
    LogMealRequest,
    PeriodSummary,
    WaterLog,
)
from .summary import MONTH_DAYS, WEEK_DAYS
from .vision import EstimationResult, decode_image

router = APIRouter(prefix="/api", tags=["Diet"])


def _decode_image_or_400(image_base64: str, max_bytes: int) -> bytes:
    try:
        data = decode_image(image_base64)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if len(data) > max_bytes:
        raise HTTPException(status_code=400, detail=f"Image too large: {len(data)} bytes > {max_bytes}")
    return data


@router.post("/meals/estimate", response_model=EstimationResult, summary="Estimate nutrition (no storage)")
def estimate_meal(request: EstimateMealRequest, tracker: Tracker = Depends(get_tracker)):
    if request.image_base64:
        image = _decode_image_or_400(request.image_base64, max_bytes=settings.max_image_bytes)
        result = tracker.estimate(image=image, mime=request.image_mime)
    elif request.description:
        result = tracker.estimate(description=request.description)
    else:
        raise HTTPException(status_code=400, detail="Provide image_base64 or description")

    if result.status == EstimationStatus.failed:
        raise HTTPException(status_code=502, detail=f"Meal estimation failed: {result.error}")
    return result


@router.post("/meals", response_model=LoggedMeal, summary="Log an estimated meal on the current day")
def log_meal(request: LogMealRequest, tracker: Tracker = Depends(get_tracker)):
    try:
        return tracker.log_meal(request.analysis, image_url=request.image_url)
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save meal: {exc}") from exc


@router.delete("/meals/{meal_id}", summary="Delete a logged meal")
def delete_meal(meal_id: str, tracker: Tracker = Depends(get_tracker)):
    try:
        deleted = tracker.delete_meal(meal_id)
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save meals: {exc}") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Meal not found")
    return {"status": "ok", "id": meal_id}


@router.post("/water", response_model=WaterLog, summary="Add (or remove) water on the current day")
def add_water(request: AddWaterRequest, tracker: Tracker = Depends(get_tracker)):
    try:
        return tracker.add_water(request.amount)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save water log: {exc}") from exc


@router.get("/dashboard", response_model=Dashboard, summary="Today's intake against goals")
def dashboard(tracker: Tracker = Depends(get_tracker)):
    return tracker.dashboard()


@router.get("/history/day", response_model=DayReport, summary="Daily report relative to today")
def day_history(
    days_back: int = Query(default=0, le=0, description="0 = today, -1 = yesterday"),
    tracker: Tracker = Depends(get_tracker),
):
    return tracker.day_report(days_back)


@router.get("/history/period", response_model=PeriodSummary, summary="Weekly or monthly calorie trend")
def period_history(
    days: int = Query(default=WEEK_DAYS, description="7 (week) or 30 (month)"),
    tracker: Tracker = Depends(get_tracker),
):
    if days not in (WEEK_DAYS, MONTH_DAYS):
        raise HTTPException(status_code=400, detail=f"days must be {WEEK_DAYS} or {MONTH_DAYS}")
    return tracker.period_report(days)
