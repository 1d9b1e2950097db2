"""
Structured exceptions for the mockup orchestrator.

This module defines a hierarchy of exceptions with error codes
for consistent error handling across the normalizer, the provider
response interpreter, the generation client and the session controller.
"""

from typing import Any, Dict, Optional


class MockupError(Exception):
    """
    Base exception for all mockup-related errors.

    All custom exceptions in the package inherit from this class,
    providing consistent error code and detail handling.
    """

    error_code: str = "MOCKUP_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for presentation layers."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# =============================================================================
# IMAGE SOURCES
# =============================================================================


class ImageSourceError(MockupError):
    """Base class for failures turning an image reference into bytes."""

    error_code = "IMAGE_SOURCE_ERROR"


class FetchError(ImageSourceError):
    """
    Raised when a remote image cannot be retrieved.

    Covers both transport failures (network error, timeout) and
    non-success HTTP statuses.
    """

    error_code = "FETCH_ERROR"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code
        if url:
            self.details["url"] = url
        if status_code is not None:
            self.details["status_code"] = status_code


class MalformedEncodingError(ImageSourceError):
    """Raised when an inline (data URL) image reference cannot be parsed."""

    error_code = "MALFORMED_ENCODING"


class InvalidImageError(ImageSourceError):
    """Raised when image content is empty or carries a non-image MIME type."""

    error_code = "INVALID_IMAGE"


# =============================================================================
# GENERATION PROVIDER
# =============================================================================


class GenerationError(MockupError):
    """
    Base class for provider outcomes that did not yield an image.

    Callers can catch this single type to handle every way the
    provider signals that no image came back.
    """

    error_code = "GENERATION_ERROR"


class BlockedRequestError(GenerationError):
    """Provider refused the request before generation started."""

    error_code = "REQUEST_BLOCKED"

    def __init__(
        self,
        message: str,
        reason: str = "",
        block_message: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.reason = reason
        self.block_message = block_message
        self.details["reason"] = reason
        if block_message:
            self.details["block_message"] = block_message


class AbnormalCompletionError(GenerationError):
    """
    Provider stopped generating for a reason other than a normal stop.

    Typically indicates safety-policy truncation.
    """

    error_code = "ABNORMAL_COMPLETION"

    def __init__(self, message: str, finish_reason: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.finish_reason = finish_reason
        self.details["finish_reason"] = finish_reason


class NoImageProducedError(GenerationError):
    """Provider answered with text only."""

    error_code = "NO_IMAGE_PRODUCED"

    def __init__(self, message: str, text: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.text = text
        if text:
            self.details["text"] = text


class MalformedResponseError(GenerationError):
    """Provider reply does not have the generateContent response shape."""

    error_code = "MALFORMED_RESPONSE"


class ProviderError(GenerationError):
    """
    Provider API call failed at the HTTP level.

    ``transient`` marks failures worth retrying: rate limits, server-side
    errors and connection problems.
    """

    error_code = "PROVIDER_ERROR"

    TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        transient: Optional[bool] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if transient is None:
            transient = status_code in self.TRANSIENT_STATUSES
        self.transient = transient
        if status_code is not None:
            self.details["status_code"] = status_code
        self.details["transient"] = self.transient


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call times out."""

    error_code = "PROVIDER_TIMEOUT"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("transient", True)
        super().__init__(message, **kwargs)


# =============================================================================
# SESSION
# =============================================================================


class SessionError(MockupError):
    """Raised when the session controller is driven incorrectly."""

    error_code = "SESSION_ERROR"


class UnknownViewError(SessionError):
    """Raised when a view index or key is not one of the recognised views."""

    error_code = "UNKNOWN_VIEW"


class ConfigError(MockupError):
    """Raised when configuration is missing or invalid."""

    error_code = "CONFIG_ERROR"
