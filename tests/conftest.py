"""
Pytest Configuration and Fixtures
Global test configuration and reusable test fixtures
"""

import base64
import os
import sys
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from mockup_agents.core.config import GenerationConfig, reset_config
from mockup_agents.models.image import CanonicalImage
from mockup_agents.models.sources import BoxItem, LocalImageFile

# 1x1 white pixel PNG
PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    test_env = {
        "MOCKUP_GEMINI_API_KEY": "test-gemini-key-12345",
        "MOCKUP_LOG_LEVEL": "ERROR",
        "MOCKUP_MAX_RETRIES": "0",
    }

    with patch.dict(os.environ, test_env):
        yield


@pytest.fixture(autouse=True)
def reset_cached_config():
    """Drop the cached GenerationConfig between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_image_base64():
    """Sample base64-encoded test image (1x1 white pixel PNG)."""
    return PNG_BASE64


@pytest.fixture
def sample_png_bytes():
    """Raw bytes of the 1x1 PNG."""
    return base64.b64decode(PNG_BASE64)


@pytest.fixture
def sample_data_url():
    """The 1x1 PNG as a data URL."""
    return f"data:image/png;base64,{PNG_BASE64}"


@pytest.fixture
def sample_box():
    """Box item hosted remotely."""
    return BoxItem(id="box-a", name="Kraft Box", url="https://images.example.com/box-a.jpg")


@pytest.fixture
def sample_logo(sample_png_bytes):
    """User-supplied logo file."""
    return LocalImageFile(content=sample_png_bytes, mime_type="image/png", name="logo.png")


@pytest.fixture
def generation_config():
    """Config with a fake key and no retries."""
    return GenerationConfig(
        api_key="test-gemini-key-12345",
        model="gemini-2.5-flash-image-preview",
        timeout=5.0,
        max_retries=0,
        retry_min_wait=0,
        retry_max_wait=0,
    )


def make_image(label: str, mime_type: str = "image/png") -> CanonicalImage:
    """Distinct canonical image whose payload spells ``label``."""
    return CanonicalImage(mime_type=mime_type, payload=label.encode())


def image_response(data: str = PNG_BASE64, mime_type: str = "image/png", text: str = None) -> dict:
    """Provider response carrying one inline image."""
    parts = []
    if text:
        parts.append({"text": text})
    parts.append({"inlineData": {"mimeType": mime_type, "data": data}})
    return {"candidates": [{"content": {"parts": parts}, "finishReason": "STOP"}]}


def text_response(text: str, finish_reason: str = "STOP") -> dict:
    """Provider response with text only."""
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}]}, "finishReason": finish_reason}
        ]
    }


def create_mock_response(json_data=None, status_code: int = 200, content: bytes = b"", headers=None):
    """Create a mock HTTP response."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.json.return_value = json_data if json_data is not None else {}
    response.text = str(json_data) if json_data is not None else ""
    response.content = content
    response.headers = headers or {}
    return response


@pytest.fixture
def mock_http_client():
    """HTTP client double with AsyncMock get/post."""
    client = MagicMock()
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_generation_client(generation_config):
    """Generation client double for controller tests."""
    client = MagicMock()
    client.config = generation_config
    client.composite_logo_onto_base = AsyncMock()
    client.regenerate_from_angle = AsyncMock()
    client.close = AsyncMock()
    return client


# Pytest configuration hooks
def pytest_configure(config):
    """Pytest configuration hook."""
    config.addinivalue_line("markers", "integration: integration tests")
    config.addinivalue_line("markers", "unit: unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    for item in items:
        if "integration" not in item.keywords:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def image_factory():
    """Factory for distinct canonical images."""
    return make_image


@pytest.fixture
def provider_responses():
    """Builders for provider JSON bodies and HTTP responses."""
    return SimpleNamespace(
        image=image_response,
        text=text_response,
        http=create_mock_response,
    )
