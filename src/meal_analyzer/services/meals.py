"""Meal persistence service."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID

from meal_analyzer.domain.analysis import FoodAnalysisResult
from meal_analyzer.domain.meals import MealRecord
from meal_analyzer.domain.nutrients import NutrientVector


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        calories: int,
        image_url: str | None,
        nutrients: NutrientVector,
        created_at: datetime,
    ) -> MealRecord:
        """Insert a meal and return the stored record."""

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MealRecord]:
        """Return meals for a user, newest first."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal by id."""


@dataclass
class MealService:
    """Stores analysis results as meals and reads them back."""

    repository: MealRepository

    def record_analysis(
        self,
        user_id: UUID,
        result: FoodAnalysisResult,
        image_url: str | None = None,
        eaten_at: datetime | None = None,
    ) -> MealRecord:
        """Persist an analysis result as a new meal."""
        return self.repository.create_meal(
            user_id=user_id,
            name=result.food_name,
            calories=round(result.nutrients.calories),
            image_url=image_url,
            nutrients=result.nutrients,
            created_at=eaten_at or datetime.now(tz=UTC),
        )

    def list_meals(self, user_id: UUID, day: date | None = None) -> list[MealRecord]:
        """Return a user's meals, limited to one UTC calendar day if given."""
        if day is None:
            return self.repository.list_meals(user_id)
        start = datetime.combine(day, time.min, tzinfo=UTC)
        return self.repository.list_meals(user_id, start, start + timedelta(days=1))

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal."""
        self.repository.delete_meal(meal_id)
