# -*- coding: utf-8 -*-
"""Goals domain: user targets and the recommended daily energy calculation."""

from .calculator import basal_metabolic_rate, recommended_calories
from .models import ActivityLevel, Gender, GoalType, UserGoal

__all__ = [
    "ActivityLevel",
    "Gender",
    "GoalType",
    "UserGoal",
    "basal_metabolic_rate",
    "recommended_calories",
]
