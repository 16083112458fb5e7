# -*- coding: utf-8 -*-
"""Goals — Pydantic models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .calculator import recommended_calories


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    very_active = "very_active"


class Gender(str, Enum):
    male = "male"
    female = "female"


class GoalType(str, Enum):
    lose = "lose"
    maintain = "maintain"
    gain = "gain"


class UserGoal(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    daily_calories: int = Field(2200, alias="dailyCalories")
    daily_water: int = Field(2500, alias="dailyWater", description="ml")
    current_weight: float = Field(70, alias="currentWeight", description="kg")
    target_weight: float = Field(70, alias="targetWeight", description="kg")
    height: float = Field(170, description="cm")
    age: int = 30
    gender: Gender = Gender.male
    activity_level: ActivityLevel = Field(ActivityLevel.moderate, alias="activityLevel")
    goal_type: GoalType = Field(GoalType.maintain, alias="goalType")

    def recommended_calories(self) -> int:
        return recommended_calories(
            self.current_weight,
            self.height,
            self.age,
            self.gender,
            self.activity_level,
            self.goal_type,
        )

    def with_recommended_calories(self) -> "UserGoal":
        return self.model_copy(update={"daily_calories": self.recommended_calories()})
