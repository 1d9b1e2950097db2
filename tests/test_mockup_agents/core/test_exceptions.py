"""
Unit tests for mockup_agents.core.exceptions module.
"""

import pytest

from mockup_agents.core.exceptions import (
    MockupError,
    ImageSourceError,
    FetchError,
    MalformedEncodingError,
    InvalidImageError,
    GenerationError,
    BlockedRequestError,
    AbnormalCompletionError,
    NoImageProducedError,
    ProviderError,
    ProviderTimeoutError,
    SessionError,
    UnknownViewError,
)


class TestMockupError:
    """Tests for base MockupError."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = MockupError("Something went wrong")
        assert str(error) == "[MOCKUP_ERROR] Something went wrong"
        assert error.message == "Something went wrong"
        assert error.error_code == "MOCKUP_ERROR"

    def test_custom_error_code(self):
        """Test error with custom code."""
        error = MockupError("Test error", error_code="CUSTOM_ERROR")
        assert error.error_code == "CUSTOM_ERROR"

    def test_to_dict(self):
        """Test error serialization."""
        error = MockupError("Test error", error_code="TEST", details={"extra": "info"})
        data = error.to_dict()
        assert data["error"] is True
        assert data["error_code"] == "TEST"
        assert data["message"] == "Test error"
        assert data["details"]["extra"] == "info"


class TestImageSourceErrors:
    """Tests for normalizer error types."""

    def test_fetch_error_carries_url_and_status(self):
        error = FetchError("Failed", url="https://x.test/a.png", status_code=404)
        assert error.error_code == "FETCH_ERROR"
        assert error.url == "https://x.test/a.png"
        assert error.details == {"url": "https://x.test/a.png", "status_code": 404}

    def test_fetch_error_without_status(self):
        error = FetchError("Network down", url="https://x.test/a.png")
        assert error.status_code is None
        assert "status_code" not in error.details

    def test_hierarchy(self):
        assert issubclass(FetchError, ImageSourceError)
        assert issubclass(MalformedEncodingError, ImageSourceError)
        assert issubclass(InvalidImageError, ImageSourceError)
        assert issubclass(ImageSourceError, MockupError)


class TestGenerationErrors:
    """Tests for provider outcome error types."""

    def test_blocked_request(self):
        error = BlockedRequestError("Blocked", reason="SAFETY", block_message="Unsafe content")
        assert error.error_code == "REQUEST_BLOCKED"
        assert error.reason == "SAFETY"
        assert error.details["block_message"] == "Unsafe content"

    def test_blocked_request_without_message(self):
        error = BlockedRequestError("Blocked", reason="OTHER")
        assert error.block_message is None
        assert "block_message" not in error.details

    def test_abnormal_completion(self):
        error = AbnormalCompletionError("Stopped", finish_reason="SAFETY")
        assert error.error_code == "ABNORMAL_COMPLETION"
        assert error.finish_reason == "SAFETY"

    def test_no_image_produced_keeps_text(self):
        error = NoImageProducedError("No image", text="I cannot do that")
        assert error.text == "I cannot do that"
        assert error.details["text"] == "I cannot do that"

    @pytest.mark.parametrize("error_class", [
        BlockedRequestError,
        AbnormalCompletionError,
        NoImageProducedError,
        ProviderError,
    ])
    def test_all_are_generation_errors(self, error_class):
        assert issubclass(error_class, GenerationError)


class TestProviderErrors:
    """Tests for HTTP-level provider errors."""

    @pytest.mark.parametrize("status_code", [429, 500, 503])
    def test_transient_statuses(self, status_code):
        error = ProviderError("Failed", status_code=status_code)
        assert error.transient is True
        assert error.details["status_code"] == status_code

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404])
    def test_permanent_statuses(self, status_code):
        assert ProviderError("Failed", status_code=status_code).transient is False

    def test_explicit_transient_flag(self):
        error = ProviderError("Connection reset", transient=True)
        assert error.transient is True
        assert error.details == {"transient": True}

    def test_timeout_is_transient(self):
        error = ProviderTimeoutError("Timed out")
        assert error.error_code == "PROVIDER_TIMEOUT"
        assert error.transient is True
        assert isinstance(error, ProviderError)


def test_unknown_view_is_session_error():
    error = UnknownViewError("Unknown view: 'Side'")
    assert isinstance(error, SessionError)
    assert error.error_code == "UNKNOWN_VIEW"
