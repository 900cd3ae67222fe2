"""Meal history endpoints."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, HTTPException, Request, status

from meal_analyzer.api.models import CreateMealRequest, MealModel
from meal_analyzer.domain.errors import AnalysisError
from meal_analyzer.services.images import decode_base64

if TYPE_CHECKING:
    from meal_analyzer.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meals", tags=["meals"])

MEAL_NOT_SAVED = "Meal analysis failed; the meal was not saved."


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_meal(body: CreateMealRequest, request: Request) -> MealModel:
    """Analyze a meal photo and store the result for the user.

    Only a successful analysis is stored. A strict-policy error and a fallback
    placeholder both return 500 and leave the meal history untouched.
    """
    container: AppContainer = request.app.state.container
    try:
        outcome = await container.analysis_pipeline.run_bytes(
            decode_base64(body.image_data), body.eaten_at
        )
    except AnalysisError as exc:
        logger.exception("Meal analysis failed", extra={"user_id": str(body.user_id)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=MEAL_NOT_SAVED
        ) from exc
    if not outcome.succeeded:
        logger.warning(
            "Fallback result not stored",
            extra={
                "user_id": str(body.user_id),
                "error_type": type(outcome.error).__name__,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=MEAL_NOT_SAVED
        )
    record = container.meal_service.record_analysis(
        user_id=body.user_id,
        result=outcome.result,
        image_url=body.image_url,
        eaten_at=body.eaten_at,
    )
    return MealModel.from_record(record)


@router.get("")
async def list_meals(
    request: Request, user_id: UUID, day: date | None = None
) -> dict[str, list[MealModel]]:
    """Return a user's meals, newest first, optionally for one day."""
    container: AppContainer = request.app.state.container
    records = container.meal_service.list_meals(user_id, day)
    return {"meals": [MealModel.from_record(record) for record in records]}


@router.delete("/{meal_id}")
async def delete_meal(meal_id: UUID, request: Request) -> dict[str, str]:
    """Delete a meal."""
    container: AppContainer = request.app.state.container
    container.meal_service.delete_meal(meal_id)
    return {"status": "ok"}
