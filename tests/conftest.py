"""Shared test fixtures."""

import base64
import io
import json
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

import pytest
from PIL import Image

from meal_analyzer.config import Settings
from meal_analyzer.containers import AppContainer
from meal_analyzer.domain.analysis import AnalysisRequest
from meal_analyzer.domain.errors import ObjectStoreFailed
from meal_analyzer.domain.meals import MealRecord
from meal_analyzer.domain.nutrients import NutrientVector
from meal_analyzer.services.analysis import MealAnalysisPipeline
from meal_analyzer.services.images import ImageCodec
from meal_analyzer.services.inference import InferenceClient
from meal_analyzer.services.meals import MealRepository, MealService
from meal_analyzer.services.requests import AnalysisRequestBuilder
from meal_analyzer.services.storage import ImageProbe, ObjectStore

RICE_REPLY = json.dumps(
    {"name": "Rice", "calories": 200, "protein": 4, "fat": 0.5, "carbohydrates": 45}
)

FULL_REPLY: dict[str, object] = {
    "name": "Salmon teriyaki bowl",
    "calories": 612.5,
    "protein": 34.2,
    "fat": 18.7,
    "carbohydrates": 71.3,
    "calcium": 45.0,
    "iron": 1.8,
    "vitamin_a": 62.0,
    "vitamin_b1": 0.32,
    "vitamin_b2": 0.27,
    "vitamin_c": 4.5,
    "vitamin_d": 11.2,
    "vitamin_e": 2.9,
    "fiber": 2.4,
    "sugar": 9.8,
    "sodium": 1210.0,
    "cholesterol": 68.0,
    "saturated_fat": 3.6,
    "trans_fat": 0.1,
    "memo": "Salmon about 100 g over 200 g of rice",
    "ingredients": [
        {"name": "salmon", "amount": "100 g"},
        {"name": "rice", "amount": "200 g"},
    ],
}


def solid_image(width: int = 10, height: int = 10, mode: str = "RGB") -> Image.Image:
    """Return a solid-color bitmap."""
    color = (200, 120, 40) if mode == "RGB" else (200, 120, 40, 128)
    return Image.new(mode, (width, height), color)


def png_base64(image: Image.Image | None = None) -> str:
    """Return an image as base64-encoded PNG text."""
    buffer = io.BytesIO()
    (image or solid_image()).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client returning a fixed reply or raising an error."""

    reply: str = RICE_REPLY
    error: Exception | None = None
    requests: list[AnalysisRequest] = field(default_factory=list)

    async def complete(self, request: AnalysisRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class InMemoryObjectStore(ObjectStore):
    """In-memory object store for tests."""

    objects: dict[str, bytes] = field(default_factory=dict)
    signed: list[tuple[str, int]] = field(default_factory=list)
    fail_on_put: bool = False

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail_on_put:
            raise ObjectStoreFailed("upload rejected")
        self.objects[key] = data

    def sign_url(self, key: str, ttl_seconds: int) -> str:
        if key not in self.objects:
            raise ObjectStoreFailed(f"missing object {key}")
        self.signed.append((key, ttl_seconds))
        return f"https://storage.test/signed/{key}?token=abc&expires={ttl_seconds}"


@dataclass
class FakeImageProbe(ImageProbe):
    """Image probe that records checked URLs."""

    checked: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def check(self, url: str) -> None:
        self.checked.append(url)
        if self.error is not None:
            raise self.error


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, MealRecord] = field(default_factory=dict)

    def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        calories: int,
        image_url: str | None,
        nutrients: NutrientVector,
        created_at: datetime,
    ) -> MealRecord:
        record = MealRecord(
            id=uuid4(),
            user_id=user_id,
            name=name,
            calories=calories,
            image_url=image_url,
            nutrients=nutrients,
            created_at=created_at,
        )
        self.meals[record.id] = record
        return record

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MealRecord]:
        records = [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id
            and (start is None or meal.created_at >= start)
            and (end is None or meal.created_at < end)
        ]
        return sorted(records, key=lambda meal: meal.created_at, reverse=True)

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)


def build_pipeline(
    inference_client: InferenceClient | None = None, **overrides: object
) -> MealAnalysisPipeline:
    """Create a pipeline around fakes; keyword overrides replace fields."""
    options: dict[str, object] = {
        "codec": ImageCodec(),
        "request_builder": AnalysisRequestBuilder(),
        "inference_client": inference_client or FakeInferenceClient(),
    }
    options.update(overrides)
    return MealAnalysisPipeline(**options)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def container(
    settings: Settings,
    inference_client: FakeInferenceClient,
    object_store: InMemoryObjectStore,
    meal_repository: InMemoryMealRepository,
) -> AppContainer:
    pipeline = build_pipeline(
        inference_client,
        object_store=object_store,
        image_probe=FakeImageProbe(),
        transport=settings.transport_mode,
        failure_policy=settings.failure_policy,
        default_confidence=settings.default_confidence,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_pipeline=pipeline,
        meal_service=MealService(meal_repository),
        close_resources=close_resources,
    )
