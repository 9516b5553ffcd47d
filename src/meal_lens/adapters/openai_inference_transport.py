"""OpenAI chat completions transport for image analysis."""

import logging
from dataclasses import dataclass

import httpx
from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from meal_lens.domain.analysis import AnalysisRequest
from meal_lens.domain.errors import (
    InvalidCredentialError,
    NetworkError,
    RateLimitedError,
)
from meal_lens.services.inference import InferenceTransport

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIInferenceTransport(InferenceTransport):
    """Posts analysis requests through the OpenAI SDK with retries disabled."""

    http_client: httpx.AsyncClient
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 60.0

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 60.0
    ) -> "OpenAIInferenceTransport":
        """Create a transport with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    def _client(self, api_key: str) -> AsyncOpenAI:
        # One SDK client per call; the bearer token is the key passed in.
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            http_client=self.http_client,
            max_retries=0,
            timeout=self.timeout_seconds,
        )

    async def send(self, request: AnalysisRequest, api_key: str) -> str:
        """Send the request and return the raw 2xx body."""
        client = self._client(api_key)
        try:
            response = await client.chat.completions.with_raw_response.create(
                **request.to_payload()
            )
        except AuthenticationError as exc:
            raise InvalidCredentialError() from exc
        except RateLimitError as exc:
            raise RateLimitedError() from exc
        except APIStatusError as exc:
            _logger.warning(
                "OpenAI error response (%s): %s", exc.status_code, exc.message
            )
            raise NetworkError(exc, status_code=exc.status_code) from exc
        except APIConnectionError as exc:
            raise NetworkError(exc) from exc
        except APIError as exc:
            raise NetworkError(exc) from exc

        body = response.http_response.text
        _logger.debug("OpenAI raw response: %s", body[:500])
        return body

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
