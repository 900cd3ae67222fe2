"""Tests for the HTTP API."""

from dataclasses import replace
from uuid import uuid4

from fastapi.testclient import TestClient

from meal_analyzer.api.app import create_app
from meal_analyzer.api.meals import MEAL_NOT_SAVED
from meal_analyzer.domain.analysis import FailurePolicy
from meal_analyzer.domain.errors import HttpStatusError
from tests.conftest import (
    FakeInferenceClient,
    InMemoryMealRepository,
    InMemoryObjectStore,
    png_base64,
)


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.json() == {"status": "ok"}


def test_analyze_meal_inline(container, inference_client: FakeInferenceClient) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze-meal",
        json={
            "image_data": png_base64(),
            "user_id": "test-user-1",
            "eaten_at": "2024-02-13T12:30:00+00:00",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["name"] == "Rice"
    assert data["calories"] == 200
    assert data["sodium"] == 0
    assert data["fallback"] is False
    assert data["image_url"] is None
    assert data["eaten_at"].startswith("2024-02-13T12:30:00")
    assert "2024-02-13T12:30:00+00:00" in inference_client.requests[0].user_text


def test_analyze_meal_stored_path(
    container, object_store: InMemoryObjectStore
) -> None:
    object_store.objects["meal_images/a.jpg"] = b"\xff\xd8\xff"
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze-meal", json={"image_path": "meal_images/a.jpg", "user_id": "u1"}
    )

    data = response.json()["data"]
    assert data["image_url"] == "meal_images/a.jpg"
    assert data["eaten_at"]
    assert object_store.signed == [("meal_images/a.jpg", 60)]


def test_analyze_meal_requires_image(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/analyze-meal", json={"user_id": "u1"})

    assert response.status_code == 422


def test_analyze_meal_rejects_invalid_base64(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze-meal", json={"user_id": "u1", "image_data": "not base64!"}
    )

    assert response.status_code == 422


def test_analyze_meal_reports_fallback(
    container, inference_client: FakeInferenceClient
) -> None:
    inference_client.error = HttpStatusError(429)
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze-meal", json={"image_data": png_base64(), "user_id": "u1"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fallback"] is True
    assert data["calories"] == 250
    assert data["confidence"] == 0.85


def test_analyze_meal_strict_policy_returns_error_envelope(
    container, inference_client: FakeInferenceClient
) -> None:
    inference_client.error = HttpStatusError(500)
    container.analysis_pipeline = replace(
        container.analysis_pipeline, failure_policy=FailurePolicy.STRICT
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze-meal", json={"image_data": png_base64(), "user_id": "u1"}
    )

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert "HttpStatusError" in body["error"]


def test_meals_create_list_delete(container) -> None:
    client = TestClient(create_app(container))
    user_id = str(uuid4())

    created = client.post(
        "/meals",
        json={
            "user_id": user_id,
            "image_data": png_base64(),
            "eaten_at": "2024-02-13T12:30:00+00:00",
        },
    )
    assert created.status_code == 201
    meal = created.json()
    assert meal["name"] == "Rice"
    assert meal["calories"] == 200
    assert meal["nutrients"]["carbohydrates"] == 45

    listed = client.get("/meals", params={"user_id": user_id, "day": "2024-02-13"})
    assert [item["id"] for item in listed.json()["meals"]] == [meal["id"]]

    other_day = client.get("/meals", params={"user_id": user_id, "day": "2024-02-14"})
    assert other_day.json()["meals"] == []

    deleted = client.delete(f"/meals/{meal['id']}")
    assert deleted.json() == {"status": "ok"}
    assert client.get("/meals", params={"user_id": user_id}).json()["meals"] == []


def test_meals_create_strict_failure_is_not_saved(
    container,
    inference_client: FakeInferenceClient,
    meal_repository: InMemoryMealRepository,
) -> None:
    inference_client.error = HttpStatusError(503)
    container.analysis_pipeline = replace(
        container.analysis_pipeline, failure_policy=FailurePolicy.STRICT
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/meals", json={"user_id": str(uuid4()), "image_data": png_base64()}
    )

    assert response.status_code == 500
    assert response.json()["detail"] == MEAL_NOT_SAVED
    assert meal_repository.meals == {}


def test_meals_create_does_not_store_fallback(
    container,
    inference_client: FakeInferenceClient,
    meal_repository: InMemoryMealRepository,
) -> None:
    inference_client.error = HttpStatusError(503)
    client = TestClient(create_app(container))

    response = client.post(
        "/meals", json={"user_id": str(uuid4()), "image_data": png_base64()}
    )

    assert response.status_code == 500
    assert response.json()["detail"] == MEAL_NOT_SAVED
    assert meal_repository.meals == {}


def test_non_finite_reply_is_reported_as_fallback(
    container, inference_client: FakeInferenceClient
) -> None:
    inference_client.reply = (
        '{"name": "Rice", "calories": NaN, "protein": 4, "fat": 0.5,'
        ' "carbohydrates": 45, "sodium": Infinity}'
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze-meal", json={"image_data": png_base64(), "user_id": "u1"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fallback"] is True
    assert data["calories"] == 250
    assert data["sodium"] == 400
