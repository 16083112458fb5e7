# -*- coding: utf-8 -*-
"""Tracker — the single owner of clock state, event logs and the user goal.

All mutations go through one instance and are persisted immediately. Request
threads and the clock ticker share it, so every read-modify-write holds the
instance lock.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional, Union

from .clock import machine
from .clock.calendar import format_time_left, next_boundary_ms, now_ms, shift_day_key
from .clock.models import ClockStatus, VirtualClockState
from .clock.storage import ClockStore
from .config import Settings, settings as default_settings
from .diet import summary, vision
from .diet.models import Dashboard, DayReport, LoggedMeal, Macronutrients, MealAnalysis, PeriodSummary, WaterLog
from .diet.storage import (
    create_meal_record,
    create_water_record,
    load_meals,
    load_water_logs,
    save_meals,
    save_water_logs,
    without_meal,
)
from .diet.vision import EstimationResult
from .goals.models import UserGoal
from .goals.storage import GoalStore
from .store import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)


class Tracker:
    def __init__(
        self,
        store: KeyValueStore,
        config: Settings | None = None,
        clock: Callable[[], int] = now_ms,
        estimator: Any = vision,
    ) -> None:
        self.store = store
        self.config = config or default_settings
        self.offset_hours = self.config.gmt_offset_hours
        self.clock = clock
        self.estimator = estimator
        # Reentrant: mutators reconcile first while already holding it.
        self._lock = threading.RLock()

        self.clock_store = ClockStore(store, self.offset_hours)
        self.goal_store = GoalStore(store)

        self.state: VirtualClockState = self.clock_store.load(self.clock())
        self.meals: List[LoggedMeal] = load_meals(store)
        self.water_logs: List[WaterLog] = load_water_logs(store)
        self.goal: UserGoal = self.goal_store.load()
        self.reconcile()

    # ---------- clock ----------

    def _set_state(self, state: VirtualClockState) -> None:
        self.state = state
        self.clock_store.save(state)

    def reconcile(self, real_now: Optional[int] = None) -> VirtualClockState:
        """Apply any real midnight that passed since the last check."""
        with self._lock:
            if real_now is None:
                real_now = self.clock()
            before = self.state
            after = machine.reconcile(before, real_now, self.offset_hours)
            if after != before:
                logger.info(
                    "Real day changed %s -> %s: day %d -> %d, offset %d -> %d",
                    before.last_observed_real_date,
                    after.last_observed_real_date,
                    before.day_count,
                    after.day_count,
                    before.day_offset,
                    after.day_offset,
                )
                self._set_state(after)
            return self.state

    def end_day_now(self) -> VirtualClockState:
        with self._lock:
            self.reconcile()
            self._set_state(machine.end_day_now(self.state))
            logger.info("Day ended manually; now day %d (offset %d)", self.state.day_count, self.state.day_offset)
            return self.state

    def reset_day_counter(self) -> VirtualClockState:
        with self._lock:
            self._set_state(machine.reset(self.clock(), self.offset_hours))
            logger.info("Day counter reset to day 1")
            return self.state

    def virtual_now(self, real_now: Optional[int] = None) -> int:
        with self._lock:
            return machine.virtual_now_ms(self.state, self.clock() if real_now is None else real_now)

    def current_day_key(self, real_now: Optional[int] = None) -> str:
        with self._lock:
            real_now = self.clock() if real_now is None else real_now
            return machine.current_day_key(self.state, real_now, self.offset_hours)

    def clock_status(self) -> ClockStatus:
        with self._lock:
            real_now = self.clock()
            self.reconcile(real_now)
            boundary = next_boundary_ms(real_now, self.offset_hours)
            return ClockStatus(
                day_offset=self.state.day_offset,
                day_count=self.state.day_count,
                last_observed_real_date=self.state.last_observed_real_date,
                virtual_date=self.current_day_key(real_now),
                real_date=self.state.last_observed_real_date,
                next_midnight=boundary,
                time_left=format_time_left(real_now, boundary),
            )

    # ---------- events ----------

    def log_meal(self, analysis: MealAnalysis, image_url: Optional[str] = None) -> LoggedMeal:
        with self._lock:
            real_now = self.clock()
            self.reconcile(real_now)
            meal = create_meal_record(analysis, timestamp=self.virtual_now(real_now), image_url=image_url)
            meals = [meal, *self.meals]
            save_meals(self.store, meals)
            self.meals = meals
            return meal

    def estimate(
        self,
        *,
        image: Union[bytes, str, None] = None,
        mime: str = "image/jpeg",
        description: Optional[str] = None,
    ) -> EstimationResult:
        """Ask the estimator for a nutrition breakdown without logging anything.

        An image that does not decode comes back as a failed result.
        """
        if image is not None:
            return self.estimator.estimate_from_image(image, mime)
        if description is not None:
            return self.estimator.estimate_from_text(description)
        raise ValueError("Either an image or a description is required")

    def estimate_and_log(
        self,
        *,
        image: Union[bytes, str, None] = None,
        mime: str = "image/jpeg",
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> tuple[EstimationResult, Optional[LoggedMeal]]:
        """Estimate and, only on success, log. Failures leave every log untouched."""
        result = self.estimate(image=image, mime=mime, description=description)
        if not result.ok or result.estimate is None:
            return result, None
        return result, self.log_meal(result.estimate, image_url=image_url)

    def delete_meal(self, meal_id: str) -> bool:
        with self._lock:
            remaining = without_meal(self.meals, meal_id)
            if remaining is None:
                return False
            save_meals(self.store, remaining)
            self.meals = remaining
            return True

    def today_water(self, real_now: Optional[int] = None) -> float:
        with self._lock:
            key = self.current_day_key(real_now)
            return summary.daily_totals([], self.water_logs, key, self.offset_hours).water

    def add_water(self, amount: float) -> WaterLog:
        with self._lock:
            real_now = self.clock()
            self.reconcile(real_now)
            if amount == 0:
                raise ValueError("Water amount must not be zero")
            if amount < 0 and self.today_water(real_now) <= 0:
                raise ValueError("No water logged today to remove")
            log = create_water_record(amount, timestamp=self.virtual_now(real_now))
            logs = [*self.water_logs, log]
            save_water_logs(self.store, logs)
            self.water_logs = logs
            return log

    # ---------- reports ----------

    def dashboard(self) -> Dashboard:
        with self._lock:
            real_now = self.clock()
            self.reconcile(real_now)
            key = self.current_day_key(real_now)
            meals = summary.meals_for_day(self.meals, key, self.offset_hours)
            totals = summary.daily_totals(meals, self.water_logs, key, self.offset_hours)
            goal = self.goal
            day_count = self.state.day_count
        boundary = next_boundary_ms(real_now, self.offset_hours)
        water_progress = min(100.0, totals.water / goal.daily_water * 100) if goal.daily_water > 0 else 0.0
        return Dashboard(
            day_count=day_count,
            date=key,
            meals=meals,
            consumed_calories=totals.calories,
            remaining_calories=max(0.0, goal.daily_calories - totals.calories),
            goal_calories=goal.daily_calories,
            macronutrients=Macronutrients(protein=totals.protein, carbs=totals.carbs, fat=totals.fat),
            water=totals.water,
            water_goal=goal.daily_water,
            water_progress=max(0.0, water_progress),
            next_midnight=boundary,
            time_left=format_time_left(real_now, boundary),
        )

    def day_report(self, days_back: int = 0) -> DayReport:
        if days_back > 0:
            raise ValueError("Cannot report on days after the current day")
        with self._lock:
            real_now = self.clock()
            self.reconcile(real_now)
            key = shift_day_key(self.current_day_key(real_now), days_back)
            totals = summary.daily_totals(self.meals, self.water_logs, key, self.offset_hours)
            return DayReport(
                date=key,
                totals=totals,
                net=summary.net_status(totals.calories, self.goal.daily_calories),
                meals=summary.meals_for_day(self.meals, key, self.offset_hours),
            )

    def period_report(self, days: int = summary.WEEK_DAYS) -> PeriodSummary:
        if days < 1:
            raise ValueError("A period needs at least one day")
        with self._lock:
            real_now = self.clock()
            self.reconcile(real_now)
            return summary.period_summary(
                self.meals,
                self.water_logs,
                self.current_day_key(real_now),
                days,
                self.goal.daily_calories,
                self.offset_hours,
            )

    # ---------- goal ----------

    def get_goal(self) -> UserGoal:
        return self.goal

    def save_goal(self, goal: UserGoal) -> UserGoal:
        with self._lock:
            self.goal_store.save(goal)
            self.goal = goal
            return goal

    @staticmethod
    def recommend_goal(goal: UserGoal) -> UserGoal:
        return goal.with_recommended_calories()


_tracker_instance: Tracker | None = None
_tracker_lock = threading.Lock()


def get_tracker() -> Tracker:
    """Process-wide tracker backed by JSON files under ``settings.data_root``."""
    global _tracker_instance
    with _tracker_lock:
        if _tracker_instance is None:
            _tracker_instance = Tracker(JsonFileStore(default_settings.data_root))
        return _tracker_instance
