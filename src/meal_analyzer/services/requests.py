"""Builds inference requests for meal photo analysis."""

from dataclasses import dataclass
from datetime import datetime

from meal_analyzer.domain.analysis import AnalysisRequest, ImageReference

DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 1000

SYSTEM_PROMPT = """You are a nutrition analysis expert. Estimate the following from the meal photo and answer in JSON only:
- the dish name and its estimated amount
- the ingredients used and their estimated amounts
- the nutrients of the whole dish shown in the photo (totals for the pictured portion, not per 100 g)

Reply with exactly this object:
{
    "name": "dish name",
    "calories": estimated energy [kcal],
    "protein": protein [g],
    "fat": fat [g],
    "carbohydrates": carbohydrates [g],
    "calcium": calcium [mg],
    "iron": iron [mg],
    "vitamin_a": vitamin A [µg],
    "vitamin_b1": vitamin B1 [mg],
    "vitamin_b2": vitamin B2 [mg],
    "vitamin_c": vitamin C [mg],
    "vitamin_d": vitamin D [µg],
    "vitamin_e": vitamin E [mg],
    "fiber": dietary fiber [g],
    "sugar": sugar [g],
    "sodium": sodium [mg],
    "cholesterol": cholesterol [mg],
    "saturated_fat": saturated fat [g],
    "trans_fat": trans fat [g],
    "memo": "details of the ingredients and amounts",
    "ingredients": [
        {"name": "ingredient name", "amount": "estimated amount"}
    ]
}

Rules:
- calories must be greater than 0
- all nutrient values are plain numbers in the units shown above
- watch the vitamin units: A and D in µg; B1, B2, C and E in mg
- if a nutrient cannot be analyzed, set it to 0; never omit a field and never use null"""

USER_PROMPT = "Analyze the nutrition of this meal."


@dataclass(frozen=True)
class AnalysisRequestBuilder:
    """Pure transform from an image reference to an inference request."""

    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS

    def build(
        self, image: ImageReference, eaten_at: datetime | None = None
    ) -> AnalysisRequest:
        """Assemble the request for one analysis attempt."""
        user_text = USER_PROMPT
        if eaten_at is not None:
            user_text = f"{USER_PROMPT} The meal was eaten at {eaten_at.isoformat()}."
        return AnalysisRequest(
            image=image,
            system_prompt=SYSTEM_PROMPT,
            user_text=user_text,
            model=self.model,
            max_tokens=self.max_tokens,
        )
