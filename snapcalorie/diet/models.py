# -*- coding: utf-8 -*-
"""Diet — Pydantic models.

Field aliases keep the stored JSON in the camelCase shape the client has
always written (``mealName``, ``totalCalories``...).
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_MEAL_NAME = "Unknown"


class Macronutrients(BaseModel):
    protein: float = Field(0.0, ge=0, description="grams")
    carbs: float = Field(0.0, ge=0, description="grams")
    fat: float = Field(0.0, ge=0, description="grams")


class MealItem(BaseModel):
    name: str = Field(..., min_length=1)
    calories: float = Field(0.0, ge=0)


class MealAnalysis(BaseModel):
    """A nutrition estimate for one meal."""

    model_config = ConfigDict(populate_by_name=True)

    meal_name: str = Field(..., alias="mealName")
    items: List[MealItem] = Field(default_factory=list)
    total_calories: float = Field(0.0, ge=0, alias="totalCalories")
    macronutrients: Macronutrients = Field(default_factory=Macronutrients)
    confidence_score: float = Field(0.0, ge=0, le=1, alias="confidenceScore")

    @property
    def is_unknown(self) -> bool:
        """The model's way of saying the input was not food."""
        return self.meal_name.strip().lower() == UNKNOWN_MEAL_NAME.lower() and self.total_calories == 0


class LoggedMeal(MealAnalysis):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    timestamp: int = Field(..., description="Epoch ms, virtual now at logging time")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class WaterLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int
    amount: float = Field(..., description="ml; negative amounts are corrections")


class DailyTotals(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    water: float = 0.0
    meal_count: int = Field(0, ge=0)

    @property
    def tracked(self) -> bool:
        return self.calories > 0


class PeriodPoint(BaseModel):
    date: str
    calories: float
    over_goal: bool


class PeriodSummary(BaseModel):
    start: str
    end: str
    days: List[PeriodPoint]
    total_calories: float
    days_tracked: int
    average_calories: int
    goal_calories: float
    insight: str


class NetStatus(BaseModel):
    difference: float = Field(..., description="consumed - goal")
    is_surplus: bool


class DayReport(BaseModel):
    date: str
    totals: DailyTotals
    net: NetStatus
    meals: List[LoggedMeal]


class Dashboard(BaseModel):
    day_count: int
    date: str
    meals: List[LoggedMeal]
    consumed_calories: float
    remaining_calories: float
    goal_calories: float
    macronutrients: Macronutrients
    water: float
    water_goal: float
    water_progress: float = Field(..., ge=0, le=100)
    next_midnight: int
    time_left: str


class EstimationStatus(str, Enum):
    ok = "ok"
    not_food = "not_food"
    failed = "failed"


class EstimateMealRequest(BaseModel):
    image_base64: Optional[str] = Field(None, description="Raw base64 or a data URL")
    image_mime: str = Field("image/jpeg", pattern=r"^image/(jpeg|jpg|png|webp|heic)$")
    description: Optional[str] = Field(None, max_length=4000)

    @field_validator("description", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class LogMealRequest(BaseModel):
    analysis: MealAnalysis
    image_url: Optional[str] = None


class AddWaterRequest(BaseModel):
    amount: float = Field(..., description="ml")
