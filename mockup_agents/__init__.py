"""
Mockup Agents - variant generation and caching for logo-on-box mockups.

Composites a user logo onto a box image with an image-generation model and
caches per-view renderings of the result for the lifetime of a session.
"""

from mockup_agents.core.config import GenerationConfig, load_config
from mockup_agents.core.exceptions import (
    MockupError,
    FetchError,
    MalformedEncodingError,
    BlockedRequestError,
    AbnormalCompletionError,
    NoImageProducedError,
)
from mockup_agents.models import CanonicalImage, BoxItem, LocalImageFile
from mockup_agents.services import (
    ImageSourceService,
    MockupGenerationClient,
    MockupSessionController,
    interpret_response,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "GenerationConfig",
    "load_config",
    # Exceptions
    "MockupError",
    "FetchError",
    "MalformedEncodingError",
    "BlockedRequestError",
    "AbnormalCompletionError",
    "NoImageProducedError",
    # Models
    "CanonicalImage",
    "BoxItem",
    "LocalImageFile",
    # Services
    "ImageSourceService",
    "MockupGenerationClient",
    "MockupSessionController",
    "interpret_response",
]
