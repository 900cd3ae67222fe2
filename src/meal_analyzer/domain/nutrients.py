"""Nutrient vector domain model."""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields

REQUIRED_NUTRIENTS: tuple[str, ...] = ("calories", "protein", "fat", "carbohydrates")

OPTIONAL_NUTRIENTS: tuple[str, ...] = (
    "calcium",
    "iron",
    "vitamin_a",
    "vitamin_b1",
    "vitamin_b2",
    "vitamin_c",
    "vitamin_d",
    "vitamin_e",
    "fiber",
    "sugar",
    "sodium",
    "cholesterol",
    "saturated_fat",
    "trans_fat",
)

NUTRIENT_UNITS: dict[str, str] = {
    "calories": "kcal",
    "protein": "g",
    "fat": "g",
    "carbohydrates": "g",
    "calcium": "mg",
    "iron": "mg",
    "vitamin_a": "µg",
    "vitamin_b1": "mg",
    "vitamin_b2": "mg",
    "vitamin_c": "mg",
    "vitamin_d": "µg",
    "vitamin_e": "mg",
    "fiber": "g",
    "sugar": "g",
    "sodium": "mg",
    "cholesterol": "mg",
    "saturated_fat": "g",
    "trans_fat": "g",
}


@dataclass(frozen=True)
class NutrientVector:
    """Nutritional content of one meal, in the units of NUTRIENT_UNITS."""

    calories: float
    protein: float
    fat: float
    carbohydrates: float
    calcium: float = 0.0
    iron: float = 0.0
    vitamin_a: float = 0.0
    vitamin_b1: float = 0.0
    vitamin_b2: float = 0.0
    vitamin_c: float = 0.0
    vitamin_d: float = 0.0
    vitamin_e: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    cholesterol: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not math.isfinite(value):
                raise ValueError(f"{item.name} must be a finite number")
            if value < 0:
                raise ValueError(f"{item.name} must not be negative")

    def to_dict(self) -> dict[str, float]:
        """Return the snake_case mapping used on the wire and in storage."""
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "NutrientVector":
        """Build a vector from stored data, treating missing values as zero."""
        values: dict[str, float] = {}
        for name in (*REQUIRED_NUTRIENTS, *OPTIONAL_NUTRIENTS):
            raw = data.get(name)
            values[name] = float(raw) if raw is not None else 0.0
        return cls(**values)
