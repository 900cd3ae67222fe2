"""Validation of model replies into typed nutrition results."""

import json
import logging
import math

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from meal_analyzer.domain.analysis import FoodAnalysisResult, Ingredient
from meal_analyzer.domain.errors import MalformedResponse
from meal_analyzer.domain.nutrients import (
    OPTIONAL_NUTRIENTS,
    REQUIRED_NUTRIENTS,
    NutrientVector,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.85


class IngredientPayload(BaseModel):
    """Ingredient entry in a model reply."""

    name: str
    amount: str


class AnalysisPayload(BaseModel):
    """Nutrition analysis object returned by the model."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    name: str = Field(
        min_length=1, validation_alias=AliasChoices("name", "food_name")
    )
    calories: float
    protein: float
    fat: float
    carbohydrates: float
    calcium: float | None = None
    iron: float | None = None
    vitamin_a: float | None = None
    vitamin_b1: float | None = None
    vitamin_b2: float | None = None
    vitamin_c: float | None = None
    vitamin_d: float | None = None
    vitamin_e: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    cholesterol: float | None = None
    saturated_fat: float | None = None
    trans_fat: float | None = None
    confidence: float | None = None
    memo: str | None = None
    ingredients: list[IngredientPayload] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _require_text(cls, value: object) -> object:
        if not isinstance(value, str):
            raise ValueError("name must be a string")
        return value.strip()

    @field_validator(*REQUIRED_NUTRIENTS, mode="before")
    @classmethod
    def _require_number(cls, value: object) -> object:
        if not _is_number(value):
            raise ValueError("must be a number")
        return _finite(value)

    @field_validator(*OPTIONAL_NUTRIENTS, mode="before")
    @classmethod
    def _optional_number(cls, value: object) -> object:
        if value is None:
            return None
        if not _is_number(value):
            raise ValueError("must be a number or null")
        return _finite(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _loose_confidence(cls, value: object) -> object:
        if not _is_number(value):
            return None
        try:
            number = _finite(value)
        except ValueError:
            return None
        return number if 0.0 <= number <= 1.0 else None

    @field_validator("memo", mode="before")
    @classmethod
    def _loose_memo(cls, value: object) -> object:
        return value if isinstance(value, str) else None

    @field_validator("ingredients", mode="before")
    @classmethod
    def _keep_wellformed_ingredients(cls, value: object) -> object:
        if not isinstance(value, list):
            return []
        kept: list[dict[str, str]] = []
        for entry in value:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                continue
            amount = entry.get("amount")
            if isinstance(amount, str) or _is_number(amount):
                kept.append({"name": entry["name"], "amount": str(amount)})
        return kept


def parse_analysis(
    raw_text: str, default_confidence: float = DEFAULT_CONFIDENCE
) -> FoodAnalysisResult:
    """Parse a model reply into a FoodAnalysisResult.

    Accepts the bare analysis object, the ``{"success", "data", "error"}``
    envelope and the nested ``{"food_name", "nutrients": {...}}`` variant.
    Missing optional nutrients become 0.0 and negative values are clamped
    to 0.0. Raises MalformedResponse for anything else.
    """
    try:
        data = json.loads(raw_text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise MalformedResponse(f"Reply is not valid JSON: {exc}") from exc
    data = _unwrap(data)
    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponse(f"Reply does not match the schema: {exc}") from exc
    return _to_result(payload, default_confidence)


def _unwrap(data: object) -> dict[str, object]:
    if not isinstance(data, dict):
        raise MalformedResponse("Reply is not a JSON object")
    if "success" in data:
        if data.get("success") is not True:
            raise MalformedResponse(str(data.get("error") or "Analysis reported failure"))
        data = data.get("data")
        if not isinstance(data, dict):
            raise MalformedResponse("Envelope has no data object")
    nested = data.get("nutrients")
    if isinstance(nested, dict):
        flattened = {key: value for key, value in data.items() if key != "nutrients"}
        flattened.update(nested)
        return flattened
    return data


def _to_result(
    payload: AnalysisPayload, default_confidence: float
) -> FoodAnalysisResult:
    values: dict[str, float] = {}
    clamped: list[str] = []
    for field_name in (*REQUIRED_NUTRIENTS, *OPTIONAL_NUTRIENTS):
        raw = getattr(payload, field_name)
        value = float(raw) if raw is not None else 0.0
        if value < 0:
            clamped.append(field_name)
            value = 0.0
        values[field_name] = value
    if clamped:
        logger.warning("Clamped negative nutrient values", extra={"fields": clamped})
    confidence = (
        payload.confidence if payload.confidence is not None else default_confidence
    )
    return FoodAnalysisResult(
        food_name=payload.name,
        nutrients=NutrientVector(**values),
        confidence=confidence,
        memo=payload.memo,
        ingredients=tuple(
            Ingredient(name=item.name, amount=item.amount)
            for item in payload.ingredients
        ),
    )


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _finite(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except OverflowError as exc:
        raise ValueError("number is out of range") from exc
    if not math.isfinite(number):
        raise ValueError("number must be finite")
    return number
