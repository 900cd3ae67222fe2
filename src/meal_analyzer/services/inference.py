"""Inference client contract."""

from typing import Protocol

from meal_analyzer.domain.analysis import AnalysisRequest


class InferenceClient(Protocol):
    """Interface for the multimodal completion call."""

    async def complete(self, request: AnalysisRequest) -> str:
        """Send the request once and return the raw reply text."""
