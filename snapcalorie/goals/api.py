# -*- coding: utf-8 -*-
"""Goals — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..tracker import Tracker, get_tracker
from .models import UserGoal

router = APIRouter(prefix="/api/goal", tags=["Goals"])


@router.get("", response_model=UserGoal, summary="Current profile and targets")
def get_goal(tracker: Tracker = Depends(get_tracker)):
    return tracker.get_goal()


@router.put("", response_model=UserGoal, summary="Replace profile and targets")
def save_goal(goal: UserGoal, tracker: Tracker = Depends(get_tracker)):
    try:
        return tracker.save_goal(goal)
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save goal: {exc}") from exc


@router.post("/recommend", response_model=UserGoal, summary="Auto-calculate the daily calorie target (not saved)")
def recommend(goal: UserGoal):
    return Tracker.recommend_goal(goal)
