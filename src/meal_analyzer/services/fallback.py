"""Placeholder result used when an analysis attempt fails."""

from meal_analyzer.domain.analysis import FoodAnalysisResult
from meal_analyzer.domain.nutrients import NutrientVector

FALLBACK_MARKER = "(fallback)"
FALLBACK_FOOD_NAME = f"Analysis unavailable {FALLBACK_MARKER}"
FALLBACK_CONFIDENCE = 0.85

FALLBACK_NUTRIENTS = NutrientVector(
    calories=250,
    protein=10,
    fat=12,
    carbohydrates=30,
    calcium=100,
    iron=2,
    vitamin_a=10,
    vitamin_b1=0.5,
    vitamin_b2=0.6,
    vitamin_c=15,
    vitamin_d=2,
    vitamin_e=1.5,
    fiber=3,
    sugar=8,
    sodium=400,
    cholesterol=20,
    saturated_fat=4,
    trans_fat=0,
)

FALLBACK_RESULT = FoodAnalysisResult(
    food_name=FALLBACK_FOOD_NAME,
    nutrients=FALLBACK_NUTRIENTS,
    confidence=FALLBACK_CONFIDENCE,
)


def fallback_result() -> FoodAnalysisResult:
    """Return the fixed placeholder result."""
    return FALLBACK_RESULT
