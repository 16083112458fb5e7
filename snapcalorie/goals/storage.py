# -*- coding: utf-8 -*-
"""Goals — persisted user goal record."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from ..store import KeyValueStore, load_json, save_json
from .models import UserGoal

logger = logging.getLogger(__name__)

GOAL_KEY = "snapcalorie_goal"


class GoalStore:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self) -> UserGoal:
        """Stored fields merged over the defaults; older records may lack newer fields."""
        raw = load_json(self.store, GOAL_KEY, None)
        if raw is None:
            return UserGoal()
        if not isinstance(raw, dict):
            logger.warning("Stored goal is not an object. Using defaults.")
            return UserGoal()
        merged = {**UserGoal().model_dump(mode="json", by_alias=True), **raw}
        try:
            return UserGoal.model_validate(merged)
        except ValidationError as exc:
            logger.warning("Stored goal is invalid, using defaults: %s", exc)
            return UserGoal()

    def save(self, goal: UserGoal) -> None:
        save_json(self.store, GOAL_KEY, goal.model_dump(mode="json", by_alias=True))
