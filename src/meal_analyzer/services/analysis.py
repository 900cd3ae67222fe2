"""Meal photo analysis pipeline."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from PIL import Image

from meal_analyzer.domain.analysis import (
    AnalysisOutcome,
    AnalysisState,
    FailurePolicy,
    FoodAnalysisResult,
    ImageReference,
    TransportMode,
)
from meal_analyzer.domain.errors import AnalysisError, HttpStatusError, ObjectStoreFailed
from meal_analyzer.services.fallback import fallback_result
from meal_analyzer.services.images import EncodedImage, ImageCodec
from meal_analyzer.services.inference import InferenceClient
from meal_analyzer.services.parsing import DEFAULT_CONFIDENCE, parse_analysis
from meal_analyzer.services.requests import AnalysisRequestBuilder
from meal_analyzer.services.storage import ImageProbe, ObjectStore, new_image_key

logger = logging.getLogger(__name__)

DEFAULT_SIGNED_URL_TTL_SECONDS = 60


@dataclass
class _Transitions:
    """Emits one log event per state change of a single invocation."""

    transport: TransportMode
    analysis_id: str = field(default_factory=lambda: uuid4().hex)
    state: AnalysisState = AnalysisState.IDLE

    def advance(self, state: AnalysisState, error: AnalysisError | None = None) -> None:
        extra: dict[str, object] = {
            "analysis_id": self.analysis_id,
            "from_state": self.state.value,
            "state": state.value,
            "transport": self.transport.value,
        }
        level = logging.INFO
        if error is not None:
            extra["error_type"] = type(error).__name__
            extra["error_message"] = str(error)
            if isinstance(error, HttpStatusError):
                extra["status_code"] = error.status_code
            level = logging.WARNING
        self.state = state
        logger.log(level, "analysis.transition", extra=extra)


@dataclass
class MealAnalysisPipeline:
    """Runs a single analysis attempt and applies the failure policy.

    The pipeline holds no per-call state, so concurrent invocations are
    independent. Every AnalysisError raised by a step is handled here:
    under FailurePolicy.FALLBACK the caller receives the placeholder
    result, under FailurePolicy.STRICT the error is re-raised.
    """

    codec: ImageCodec
    request_builder: AnalysisRequestBuilder
    inference_client: InferenceClient
    object_store: ObjectStore | None = None
    image_probe: ImageProbe | None = None
    transport: TransportMode = TransportMode.INLINE
    failure_policy: FailurePolicy = FailurePolicy.FALLBACK
    signed_url_ttl_seconds: int = DEFAULT_SIGNED_URL_TTL_SECONDS
    default_confidence: float = DEFAULT_CONFIDENCE

    async def analyze(
        self, image: Image.Image, eaten_at: datetime | None = None
    ) -> FoodAnalysisResult:
        """Analyze a captured bitmap and return a result."""
        outcome = await self.run(image, eaten_at)
        return outcome.result

    async def analyze_stored(
        self, key: str, eaten_at: datetime | None = None
    ) -> FoodAnalysisResult:
        """Analyze an image that is already in the object store."""
        outcome = await self.run_stored(key, eaten_at)
        return outcome.result

    async def analyze_bytes(
        self, data: bytes, eaten_at: datetime | None = None
    ) -> FoodAnalysisResult:
        """Analyze uploaded image bytes in any format Pillow can read."""
        outcome = await self.run_bytes(data, eaten_at)
        return outcome.result

    async def run(
        self, image: Image.Image, eaten_at: datetime | None = None
    ) -> AnalysisOutcome:
        """Analyze a bitmap and report how the result was produced."""
        return await self._run_capture(lambda: self.codec.encode(image), eaten_at)

    async def run_bytes(
        self, data: bytes, eaten_at: datetime | None = None
    ) -> AnalysisOutcome:
        """Decode image bytes, then analyze them like a captured bitmap."""
        return await self._run_capture(
            lambda: self.codec.encode(self.codec.decode(data)), eaten_at
        )

    async def _run_capture(
        self, encode: Callable[[], EncodedImage], eaten_at: datetime | None
    ) -> AnalysisOutcome:
        transitions = _Transitions(transport=self._effective_transport())
        try:
            transitions.advance(AnalysisState.ENCODING)
            encoded = encode()
            if transitions.transport is TransportMode.SIGNED_URL:
                transitions.advance(AnalysisState.UPLOADING)
                key = new_image_key()
                self._upload(key, encoded)
                reference = await self._signed_reference(key)
            else:
                reference = ImageReference(
                    url=encoded.to_data_url(), transport=TransportMode.INLINE
                )
            result = await self._request(transitions, reference, eaten_at)
        except AnalysisError as exc:
            return self._handle_failure(transitions, exc)
        transitions.advance(AnalysisState.SUCCEEDED)
        return AnalysisOutcome(result=result, state=AnalysisState.SUCCEEDED)

    async def run_stored(
        self, key: str, eaten_at: datetime | None = None
    ) -> AnalysisOutcome:
        """Analyze a stored image through a freshly signed URL."""
        transitions = _Transitions(transport=TransportMode.SIGNED_URL)
        try:
            transitions.advance(AnalysisState.UPLOADING)
            reference = await self._signed_reference(key)
            result = await self._request(transitions, reference, eaten_at)
        except AnalysisError as exc:
            return self._handle_failure(transitions, exc)
        transitions.advance(AnalysisState.SUCCEEDED)
        return AnalysisOutcome(result=result, state=AnalysisState.SUCCEEDED)

    async def _request(
        self,
        transitions: _Transitions,
        reference: ImageReference,
        eaten_at: datetime | None,
    ) -> FoodAnalysisResult:
        transitions.advance(AnalysisState.REQUESTING)
        request = self.request_builder.build(reference, eaten_at)
        raw_text = await self.inference_client.complete(request)
        transitions.advance(AnalysisState.PARSING)
        return parse_analysis(raw_text, self.default_confidence)

    def _upload(self, key: str, encoded: EncodedImage) -> None:
        if self.object_store is None:
            raise ObjectStoreFailed("No object store configured")
        self.object_store.put_object(key, encoded.data, encoded.mime_type)

    async def _signed_reference(self, key: str) -> ImageReference:
        if self.object_store is None:
            raise ObjectStoreFailed("No object store configured")
        url = self.object_store.sign_url(key, self.signed_url_ttl_seconds)
        if self.image_probe is not None:
            await self.image_probe.check(url)
        return ImageReference(url=url, transport=TransportMode.SIGNED_URL)

    def _handle_failure(
        self, transitions: _Transitions, error: AnalysisError
    ) -> AnalysisOutcome:
        if self.failure_policy is FailurePolicy.STRICT:
            transitions.advance(AnalysisState.FAILED, error=error)
            raise error
        transitions.advance(AnalysisState.FAILED_FALLBACK, error=error)
        return AnalysisOutcome(
            result=fallback_result(),
            state=AnalysisState.FAILED_FALLBACK,
            error=error,
        )

    def _effective_transport(self) -> TransportMode:
        if self.transport is TransportMode.SIGNED_URL and self.object_store is None:
            logger.warning(
                "Signed URL transport requested without an object store; "
                "sending the image inline"
            )
            return TransportMode.INLINE
        return self.transport
