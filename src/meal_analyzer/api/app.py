"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meal_analyzer.api.meals import router as meals_router
from meal_analyzer.api.models import AnalysisData, AnalysisEnvelope, AnalyzeMealRequest
from meal_analyzer.app_logging import configure_logging
from meal_analyzer.containers import AppContainer
from meal_analyzer.domain.errors import AnalysisError
from meal_analyzer.services.images import decode_base64


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    app.include_router(meals_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze-meal", response_model=AnalysisEnvelope)
    async def analyze_meal(body: AnalyzeMealRequest, request: Request):  # noqa: ANN202
        """Analyze a meal photo sent inline or referenced by storage path."""
        state_container: AppContainer = request.app.state.container
        pipeline = state_container.analysis_pipeline
        eaten_at = body.eaten_at or datetime.now(tz=UTC)
        try:
            if body.image_data:
                outcome = await pipeline.run_bytes(
                    decode_base64(body.image_data), body.eaten_at
                )
            else:
                outcome = await pipeline.run_stored(body.image_path, body.eaten_at)
        except AnalysisError as exc:
            logger.exception(
                "Meal analysis failed",
                extra={"user_id": body.user_id, "image_path": body.image_path},
            )
            envelope = AnalysisEnvelope(
                success=False, error=format_analysis_error(state_container, exc)
            )
            return JSONResponse(status_code=500, content=envelope.model_dump(mode="json"))

        return AnalysisEnvelope(
            success=True,
            data=AnalysisData.from_result(
                outcome.result,
                image_url=body.image_path,
                eaten_at=eaten_at,
                fallback=not outcome.succeeded,
            ),
        )

    return app


def format_analysis_error(state_container: AppContainer, exc: Exception) -> str:
    """Return a client-facing analysis error message with local debug info."""
    message = "Meal analysis failed."
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{message} (debug: {detail})"
    return message
