"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_analyzer.adapters.openai_inference_client import OpenAIInferenceClient
from meal_analyzer.adapters.signed_url_probe import HttpxImageProbe
from meal_analyzer.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_analyzer.adapters.supabase_object_store import SupabaseObjectStore
from meal_analyzer.config import Settings
from meal_analyzer.services.analysis import MealAnalysisPipeline
from meal_analyzer.services.images import ImageCodec
from meal_analyzer.services.meals import MealService
from meal_analyzer.services.requests import AnalysisRequestBuilder


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_pipeline: MealAnalysisPipeline
    meal_service: MealService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    inference_client = OpenAIInferenceClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    image_probe = HttpxImageProbe.create()
    analysis_pipeline = MealAnalysisPipeline(
        codec=ImageCodec(quality=resolved_settings.jpeg_quality),
        request_builder=AnalysisRequestBuilder(
            model=resolved_settings.openai_model,
            max_tokens=resolved_settings.openai_max_tokens,
        ),
        inference_client=inference_client,
        object_store=SupabaseObjectStore(
            supabase_client, bucket=resolved_settings.storage_bucket
        ),
        image_probe=image_probe,
        transport=resolved_settings.transport_mode,
        failure_policy=resolved_settings.failure_policy,
        signed_url_ttl_seconds=resolved_settings.signed_url_ttl_seconds,
        default_confidence=resolved_settings.default_confidence,
    )
    meal_service = MealService(SupabaseMealRepository(supabase_client))

    async def close_resources() -> None:
        await inference_client.close()
        await image_probe.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_pipeline=analysis_pipeline,
        meal_service=meal_service,
        close_resources=close_resources,
    )
