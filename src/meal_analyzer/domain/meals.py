"""Persisted meal models."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from meal_analyzer.domain.nutrients import NutrientVector


@dataclass(frozen=True)
class MealRecord:
    """Meal row as stored in the meals table."""

    id: UUID
    user_id: UUID
    name: str
    calories: int
    image_url: str | None
    nutrients: NutrientVector
    created_at: datetime
    updated_at: datetime | None = None
