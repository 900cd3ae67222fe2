"""Request and response models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from meal_analyzer.domain.analysis import FoodAnalysisResult
from meal_analyzer.domain.errors import ImageEncodingFailed
from meal_analyzer.domain.meals import MealRecord
from meal_analyzer.services.images import decode_base64


def _validate_base64(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        decode_base64(value)
    except ImageEncodingFailed as exc:
        raise ValueError(str(exc)) from exc
    return value


class AnalyzeMealRequest(BaseModel):
    """Body of an analyze-meal call: a stored image path or inline base64."""

    user_id: str
    image_path: str | None = None
    image_data: str | None = None
    eaten_at: datetime | None = None

    @field_validator("image_data")
    @classmethod
    def _check_image_data(cls, value: str | None) -> str | None:
        return _validate_base64(value)

    @model_validator(mode="after")
    def _require_image(self) -> "AnalyzeMealRequest":
        if not self.image_path and not self.image_data:
            raise ValueError("image_path or image_data is required")
        return self


class CreateMealRequest(BaseModel):
    """Body for analyzing a photo and saving it as a meal."""

    user_id: UUID
    image_data: str
    image_url: str | None = None
    eaten_at: datetime | None = None

    @field_validator("image_data")
    @classmethod
    def _check_image_data(cls, value: str) -> str:
        return _validate_base64(value)


class IngredientModel(BaseModel):
    name: str
    amount: str


class AnalysisData(BaseModel):
    """Analysis payload returned to clients."""

    name: str
    calories: float
    protein: float
    fat: float
    carbohydrates: float
    calcium: float
    iron: float
    vitamin_a: float
    vitamin_b1: float
    vitamin_b2: float
    vitamin_c: float
    vitamin_d: float
    vitamin_e: float
    fiber: float
    sugar: float
    sodium: float
    cholesterol: float
    saturated_fat: float
    trans_fat: float
    confidence: float
    memo: str | None = None
    ingredients: list[IngredientModel] = []
    image_url: str | None = None
    eaten_at: datetime
    fallback: bool = False

    @classmethod
    def from_result(
        cls,
        result: FoodAnalysisResult,
        *,
        image_url: str | None,
        eaten_at: datetime,
        fallback: bool,
    ) -> "AnalysisData":
        return cls(
            name=result.food_name,
            **result.nutrients.to_dict(),
            confidence=result.confidence,
            memo=result.memo,
            ingredients=[
                IngredientModel(name=item.name, amount=item.amount)
                for item in result.ingredients
            ],
            image_url=image_url,
            eaten_at=eaten_at,
            fallback=fallback,
        )


class AnalysisEnvelope(BaseModel):
    """Success envelope shared with the mobile client."""

    success: bool
    data: AnalysisData | None = None
    error: str | None = None


class MealModel(BaseModel):
    """Meal as returned by the meals endpoints."""

    id: UUID
    user_id: UUID
    name: str
    calories: int
    image_url: str | None
    nutrients: dict[str, float]
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: MealRecord) -> "MealModel":
        return cls(
            id=record.id,
            user_id=record.user_id,
            name=record.name,
            calories=record.calories,
            image_url=record.image_url,
            nutrients=record.nutrients.to_dict(),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
