"""Error taxonomy for the food analysis pipeline."""

from enum import StrEnum


class AnalysisErrorKind(StrEnum):
    """Closed set of pipeline failure kinds."""

    NO_CONNECTION = "no_connection"
    IMAGE_TOO_LARGE = "image_too_large"
    INVALID_IMAGE = "invalid_image"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    DECODING_ERROR = "decoding_error"
    NETWORK_ERROR = "network_error"


class AnalysisError(Exception):
    """Base class for failures surfaced by the analysis pipeline."""

    kind: AnalysisErrorKind
    user_message: str

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class NoConnectionError(AnalysisError):
    kind = AnalysisErrorKind.NO_CONNECTION
    user_message = "No internet connection. Please check your network and try again."


class ImageTooLargeError(AnalysisError):
    kind = AnalysisErrorKind.IMAGE_TOO_LARGE
    user_message = "Image is too large. Please try with a smaller image."


class InvalidImageError(AnalysisError):
    kind = AnalysisErrorKind.INVALID_IMAGE
    user_message = "The image could not be read. Please try another photo."


class InvalidCredentialError(AnalysisError):
    kind = AnalysisErrorKind.INVALID_CREDENTIAL
    user_message = "Invalid API key. Please check your OpenAI API key in Settings."


class RateLimitedError(AnalysisError):
    kind = AnalysisErrorKind.RATE_LIMITED
    user_message = "API rate limit exceeded. Please try again later."


class DecodingError(AnalysisError):
    """Model output could not be turned into an analysis result."""

    kind = AnalysisErrorKind.DECODING_ERROR
    user_message = "Failed to parse the response. Please try again."

    def __init__(self, cause: Exception | None = None) -> None:
        detail = f"{self.user_message} ({cause})" if cause else None
        super().__init__(detail)
        self.cause = cause


class NetworkError(AnalysisError):
    """Transport failure or unexpected HTTP status."""

    kind = AnalysisErrorKind.NETWORK_ERROR
    user_message = "Network error. Please try again."

    def __init__(
        self, cause: Exception | None = None, status_code: int | None = None
    ) -> None:
        if status_code is not None:
            detail = f"Network error: HTTP {status_code}"
        elif cause is not None:
            detail = f"Network error: {cause}"
        else:
            detail = None
        super().__init__(detail)
        self.cause = cause
        self.status_code = status_code


def is_retryable(error: Exception, *, retry_decoding_errors: bool = False) -> bool:
    """Return True when another attempt may succeed for the same request."""
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, DecodingError):
        return retry_decoding_errors
    return False


class StorageError(RuntimeError):
    """Raised when persisted local state cannot be read."""
