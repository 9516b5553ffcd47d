"""Inference client: dispatch, retry, and decoding of model answers."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from meal_lens.domain.analysis import (
    AnalysisRequest,
    AnalysisResult,
    ChatCompletionEnvelope,
)
from meal_lens.domain.errors import (
    AnalysisError,
    DecodingError,
    NetworkError,
    is_retryable,
)
from meal_lens.domain.images import PreprocessedImage
from meal_lens.services.request_builder import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    build_analysis_request,
)

_logger = logging.getLogger(__name__)

_FENCE_MARKERS = ("```json", "```")


class InferenceTransport(Protocol):
    """Sends one analysis request to the inference provider."""

    async def send(self, request: AnalysisRequest, api_key: str) -> str:
        """Return the raw body of a successful response.

        Raises InvalidCredentialError on 401, RateLimitedError on 429 and
        NetworkError for any other status or transport failure.
        """


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    cleaned = text
    for marker in _FENCE_MARKERS:
        cleaned = cleaned.replace(marker, "")
    return cleaned.strip()


def decode_analysis(body: str) -> AnalysisResult:
    """Extract and validate the analysis from a chat completion body."""
    try:
        envelope = ChatCompletionEnvelope.model_validate_json(body)
    except ValidationError as exc:
        raise DecodingError(exc) from exc
    if not envelope.choices or envelope.choices[0].message.content is None:
        raise DecodingError(ValueError("No content in response"))

    content = strip_code_fences(envelope.choices[0].message.content)
    try:
        return AnalysisResult.model_validate_json(content)
    except ValidationError as exc:
        raise DecodingError(exc) from exc


@dataclass
class InferenceClient:
    """Runs the request/retry/decode cycle for a preprocessed image."""

    transport: InferenceTransport
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    max_attempts: int = 2
    retry_delay_seconds: float = 2.0
    retry_decoding_errors: bool = False

    async def analyze(self, image: PreprocessedImage, api_key: str) -> AnalysisResult:
        """Return the decoded analysis or raise a typed AnalysisError."""
        request = build_analysis_request(
            image.to_base64(), model=self.model, max_tokens=self.max_tokens
        )
        attempts = max(1, self.max_attempts)
        attempt = 0
        while True:
            attempt += 1
            try:
                body = await self.transport.send(request, api_key)
                return decode_analysis(body)
            except AnalysisError as exc:
                error = exc
            except Exception as exc:
                error = NetworkError(exc)
                error.__cause__ = exc

            retryable = is_retryable(
                error, retry_decoding_errors=self.retry_decoding_errors
            )
            _logger.warning(
                "Analysis attempt %s/%s failed (%s, retryable=%s): %s",
                attempt,
                attempts,
                error.kind,
                retryable,
                error,
            )
            if not retryable or attempt >= attempts:
                raise error
            await asyncio.sleep(self.retry_delay_seconds)
