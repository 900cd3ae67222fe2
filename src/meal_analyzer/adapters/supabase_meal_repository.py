"""Supabase repository for meals."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_analyzer.domain.meals import MealRecord
from meal_analyzer.domain.nutrients import NutrientVector
from meal_analyzer.services.meals import MealRepository

_COLUMNS = "id, user_id, name, calories, image_url, nutrients, created_at, updated_at"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meal rows."""

    client: Client

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        calories: int,
        image_url: str | None,
        nutrients: NutrientVector,
        created_at: datetime,
    ) -> MealRecord:
        """Insert a meal row and return it."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": str(user_id),
                    "name": name,
                    "calories": calories,
                    "image_url": image_url,
                    "nutrients": nutrients.to_dict(),
                    "created_at": created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MealRecord]:
        """Return a user's meals, newest first, optionally within [start, end)."""
        query = self.client.table("meals").select(_COLUMNS).eq("user_id", str(user_id))
        if start is not None:
            query = query.gte("created_at", start.isoformat())
        if end is not None:
            query = query.lt("created_at", end.isoformat())
        response = query.order("created_at", desc=True).execute()
        return [_parse_meal(row) for row in response.data or []]

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal row."""
        self.client.table("meals").delete().eq("id", str(meal_id)).execute()


def _parse_meal(row: dict[str, object]) -> MealRecord:
    updated_at = row.get("updated_at")
    return MealRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        calories=int(row.get("calories") or 0),
        image_url=row.get("image_url"),
        nutrients=NutrientVector.from_mapping(row.get("nutrients") or {}),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(updated_at)) if updated_at else None,
    )
