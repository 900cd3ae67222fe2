"""OpenAI chat completions client for meal analysis."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from meal_analyzer.domain.analysis import AnalysisRequest
from meal_analyzer.domain.errors import (
    HttpStatusError,
    InferenceTimeout,
    MalformedResponse,
    NetworkError,
)
from meal_analyzer.services.inference import InferenceClient

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass
class OpenAIInferenceClient(InferenceClient):
    """Inference client backed by the OpenAI chat completions API."""

    client: AsyncOpenAI
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    ) -> "OpenAIInferenceClient":
        """Create a client that makes exactly one attempt per call."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, max_retries=0, timeout=timeout_seconds
            ),
            timeout_seconds=timeout_seconds,
        )

    async def complete(self, request: AnalysisRequest) -> str:
        """Call chat completions in JSON mode and return the reply text."""
        try:
            response = await self.client.chat.completions.create(
                **request.to_payload(), timeout=self.timeout_seconds
            )
        except (openai.APITimeoutError, TimeoutError) as exc:
            raise InferenceTimeout(
                f"No reply within {self.timeout_seconds:g}s"
            ) from exc
        except openai.APIStatusError as exc:
            raise HttpStatusError(exc.status_code, str(exc)) from exc
        except openai.APIConnectionError as exc:
            raise NetworkError(f"OpenAI connection failed: {exc}") from exc
        except (openai.APIError, ValueError) as exc:
            raise MalformedResponse(
                f"OpenAI returned an unreadable response: {exc}"
            ) from exc

        # Non-JSON bodies without a JSON content type come back as plain text.
        choices = getattr(response, "choices", None)
        if not choices:
            raise MalformedResponse("OpenAI returned no choices")
        content = choices[0].message.content
        if not content:
            raise MalformedResponse("OpenAI returned an empty response")
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
