# -*- coding: utf-8 -*-
"""
Daily energy target

Mifflin-St Jeor BMR, scaled by an activity factor, shifted by a fixed amount
for weight loss or gain. Inputs are not validated here; the settings form
constrains them.
"""

from __future__ import annotations

import math

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

GOAL_ADJUSTMENT_KCAL = {
    "lose": -500.0,
    "maintain": 0.0,
    "gain": 500.0,
}


def round_half_up(value: float) -> int:
    """Round .5 upwards (``round`` would pick the even neighbour)."""
    return int(math.floor(value + 0.5))


def _key(value: object) -> str:
    return str(getattr(value, "value", value))


def basal_metabolic_rate(weight_kg: float, height_cm: float, age: float, gender: object) -> float:
    """Mifflin-St Jeor BMR in kcal/day."""
    s = 5 if _key(gender) == "male" else -161
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + s


def activity_factor(activity_level: object) -> float:
    return ACTIVITY_MULTIPLIERS[_key(activity_level)]


def recommended_calories(
    weight_kg: float,
    height_cm: float,
    age: float,
    gender: object,
    activity_level: object = "moderate",
    goal_type: object = "maintain",
) -> int:
    """
    Recommended daily calories.

    Example: 70 kg, 170 cm, 30 y, male, moderate, maintain
    -> BMR 1591.5 -> round(1591.5 * 1.55) = 2467 kcal
    """
    bmr = basal_metabolic_rate(weight_kg, height_cm, age, gender)
    tdee = bmr * activity_factor(activity_level)
    return round_half_up(tdee + GOAL_ADJUSTMENT_KCAL[_key(goal_type)])
