"""Error taxonomy for the meal analysis pipeline."""


class AnalysisError(Exception):
    """Base class for failures inside a single analysis attempt."""


class ImageEncodingFailed(AnalysisError):
    """The captured image could not be serialized."""


class ObjectStoreFailed(AnalysisError):
    """Upload, signing or the signed URL check failed."""


class NetworkError(AnalysisError):
    """The inference endpoint could not be reached."""


class HttpStatusError(AnalysisError):
    """The inference endpoint answered with a non-success status."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Inference request failed with HTTP {status_code}")


class InferenceTimeout(AnalysisError):
    """The inference call did not finish within the configured bound."""


class MalformedResponse(AnalysisError):
    """The model reply is not a valid nutrition analysis."""
