# -*- coding: utf-8 -*-
"""Diet — per-day and per-period aggregation.

Every event is bucketed by its own stored timestamp, so meals logged while the
clock was running ahead land on the virtual day they were logged for.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from ..clock.calendar import GMT_OFFSET_HOURS, day_key, day_keys_ending
from ..goals.calculator import round_half_up
from .models import DailyTotals, LoggedMeal, NetStatus, PeriodPoint, PeriodSummary, WaterLog

WEEK_DAYS = 7
MONTH_DAYS = 30


def _rounded(totals: DailyTotals) -> DailyTotals:
    return DailyTotals(
        date=totals.date,
        calories=round(totals.calories, 1),
        protein=round(totals.protein, 1),
        carbs=round(totals.carbs, 1),
        fat=round(totals.fat, 1),
        water=round(totals.water, 1),
        meal_count=totals.meal_count,
    )


def aggregate_by_day(
    meals: Iterable[LoggedMeal],
    water_logs: Iterable[WaterLog],
    offset_hours: float = GMT_OFFSET_HOURS,
) -> Dict[str, DailyTotals]:
    per_day: Dict[str, DailyTotals] = {}

    def bucket(timestamp: int) -> DailyTotals:
        key = day_key(timestamp, offset_hours)
        if key not in per_day:
            per_day[key] = DailyTotals(date=key)
        return per_day[key]

    for meal in meals:
        day = bucket(meal.timestamp)
        day.calories += meal.total_calories
        day.protein += meal.macronutrients.protein
        day.carbs += meal.macronutrients.carbs
        day.fat += meal.macronutrients.fat
        day.meal_count += 1

    for log in water_logs:
        bucket(log.timestamp).water += log.amount

    return {key: _rounded(day) for key, day in per_day.items()}


def daily_totals(
    meals: Iterable[LoggedMeal],
    water_logs: Iterable[WaterLog],
    key: str,
    offset_hours: float = GMT_OFFSET_HOURS,
) -> DailyTotals:
    """Totals for one civil day; a day without events is all zeros."""
    return aggregate_by_day(meals, water_logs, offset_hours).get(key) or DailyTotals(date=key)


def meals_for_day(
    meals: Iterable[LoggedMeal],
    key: str,
    offset_hours: float = GMT_OFFSET_HOURS,
) -> List[LoggedMeal]:
    return [m for m in meals if day_key(m.timestamp, offset_hours) == key]


def net_status(calories: float, goal_calories: float) -> NetStatus:
    diff = calories - goal_calories
    return NetStatus(difference=round(diff, 1), is_surplus=diff > 0)


def _insight(average: int, goal_calories: float) -> str:
    if average > goal_calories:
        return (
            f"You are averaging {average - goal_calories:.0f} calories over your daily maintenance goal. "
            "This is consistent with a weight gain strategy."
        )
    return (
        f"You are averaging {goal_calories - average:.0f} calories under your daily goal. "
        "This creates a deficit consistent with weight loss."
    )


def period_summary(
    meals: Iterable[LoggedMeal],
    water_logs: Iterable[WaterLog],
    end_key: str,
    days: int,
    goal_calories: float,
    offset_hours: float = GMT_OFFSET_HOURS,
) -> PeriodSummary:
    """Calorie trend for ``days`` consecutive days ending at ``end_key``.

    The average only counts tracked days: a day without meals means nothing
    was logged, not that nothing was eaten.
    """
    per_day = aggregate_by_day(meals, water_logs, offset_hours)
    keys = day_keys_ending(end_key, days)

    points: List[PeriodPoint] = []
    total = 0.0
    tracked = 0
    for key in keys:
        stats = per_day.get(key) or DailyTotals(date=key)
        if stats.tracked:
            total += stats.calories
            tracked += 1
        points.append(PeriodPoint(date=key, calories=stats.calories, over_goal=stats.calories > goal_calories))

    average = round_half_up(total / tracked) if tracked else 0
    return PeriodSummary(
        start=keys[0] if keys else end_key,
        end=end_key,
        days=points,
        total_calories=round(total, 1),
        days_tracked=tracked,
        average_calories=average,
        goal_calories=goal_calories,
        insight=_insight(average, goal_calories),
    )
