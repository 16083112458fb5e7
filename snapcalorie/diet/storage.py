# -*- coding: utf-8 -*-
"""Diet — meal and water event logs on the key-value store."""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import uuid4

from pydantic import ValidationError

from ..store import KeyValueStore, load_json, save_json
from .models import LoggedMeal, MealAnalysis, WaterLog

logger = logging.getLogger(__name__)

MEALS_KEY = "snapcalorie_meals"
WATER_KEY = "snapcalorie_water"


def create_meal_record(
    analysis: MealAnalysis,
    *,
    timestamp: int,
    image_url: Optional[str] = None,
) -> LoggedMeal:
    return LoggedMeal(
        **analysis.model_dump(),
        id=str(uuid4()),
        timestamp=timestamp,
        image_url=image_url,
    )


def create_water_record(amount: float, *, timestamp: int) -> WaterLog:
    return WaterLog(id=str(uuid4()), timestamp=timestamp, amount=amount)


def load_meals(store: KeyValueStore) -> List[LoggedMeal]:
    meals: List[LoggedMeal] = []
    raw = load_json(store, MEALS_KEY, [])
    if not isinstance(raw, list):
        logger.warning("Stored meals are not a list. Starting fresh.")
        return meals
    for item in raw:
        try:
            meals.append(LoggedMeal.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping unreadable meal entry: %s", exc)
    return meals


def save_meals(store: KeyValueStore, meals: List[LoggedMeal]) -> None:
    save_json(store, MEALS_KEY, [m.model_dump(mode="json", by_alias=True) for m in meals])


def load_water_logs(store: KeyValueStore) -> List[WaterLog]:
    logs: List[WaterLog] = []
    raw = load_json(store, WATER_KEY, [])
    if not isinstance(raw, list):
        logger.warning("Stored water logs are not a list. Starting fresh.")
        return logs
    for item in raw:
        try:
            logs.append(WaterLog.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping unreadable water entry: %s", exc)
    return logs


def save_water_logs(store: KeyValueStore, logs: List[WaterLog]) -> None:
    save_json(store, WATER_KEY, [w.model_dump(mode="json") for w in logs])


def without_meal(meals: List[LoggedMeal], meal_id: str) -> Optional[List[LoggedMeal]]:
    """A copy of ``meals`` minus ``meal_id``, or None when the id is unknown."""
    remaining = [m for m in meals if m.id != meal_id]
    if len(remaining) == len(meals):
        return None
    return remaining
