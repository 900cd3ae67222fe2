"""Analysis request and result models."""

from dataclasses import dataclass, field
from enum import Enum

from meal_analyzer.domain.errors import AnalysisError
from meal_analyzer.domain.nutrients import NutrientVector


class TransportMode(str, Enum):
    """How the image reaches the inference API."""

    INLINE = "inline"
    SIGNED_URL = "signed_url"


class FailurePolicy(str, Enum):
    """What the pipeline does when an attempt fails."""

    FALLBACK = "fallback"
    STRICT = "strict"


class AnalysisState(str, Enum):
    """Pipeline states, in transition order."""

    IDLE = "idle"
    ENCODING = "encoding"
    UPLOADING = "uploading"
    REQUESTING = "requesting"
    PARSING = "parsing"
    SUCCEEDED = "succeeded"
    FAILED_FALLBACK = "failed_fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class Ingredient:
    """Ingredient and estimated amount reported by the model."""

    name: str
    amount: str


@dataclass(frozen=True)
class FoodAnalysisResult:
    """Outcome of one analysis: dish name, nutrients and confidence."""

    food_name: str
    nutrients: NutrientVector
    confidence: float
    memo: str | None = None
    ingredients: tuple[Ingredient, ...] = ()

    def __post_init__(self) -> None:
        if not self.food_name:
            raise ValueError("food_name must not be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")


@dataclass(frozen=True)
class ImageReference:
    """Image location sent to the model: a data URL or a signed URL."""

    url: str
    transport: TransportMode
    detail: str = "high"


@dataclass(frozen=True)
class AnalysisRequest:
    """Outbound chat completion request for one analysis attempt."""

    image: ImageReference
    system_prompt: str
    user_text: str
    model: str
    max_tokens: int
    response_format: dict[str, str] = field(
        default_factory=lambda: {"type": "json_object"}
    )

    def to_payload(self) -> dict[str, object]:
        """Return keyword arguments for the chat completions endpoint."""
        return {
            "model": self.model,
            "response_format": self.response_format,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": self.image.url,
                                "detail": self.image.detail,
                            },
                        },
                        {"type": "text", "text": self.user_text},
                    ],
                },
            ],
            "max_tokens": self.max_tokens,
        }


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result plus the terminal state that produced it."""

    result: FoodAnalysisResult
    state: AnalysisState
    error: AnalysisError | None = None

    @property
    def succeeded(self) -> bool:
        """Return true when the result came from the model."""
        return self.state is AnalysisState.SUCCEEDED
