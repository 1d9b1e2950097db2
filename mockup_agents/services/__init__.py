"""
Services layer for the mockup orchestrator.

- Image source normalization (URLs, data URLs, uploaded files)
- Provider response interpretation and failure classification
- Generation requests against the image model
- Per-session variant cache and state machine
"""
from mockup_agents.services.image_source_service import (
    ImageSourceService,
    parse_data_url,
    detect_mime_type,
)
from mockup_agents.services.response_interpreter import (
    interpret_response,
    extract_text,
)
from mockup_agents.services.generation_client import MockupGenerationClient
from mockup_agents.services.session_controller import MockupSessionController

__all__ = [
    "ImageSourceService",
    "parse_data_url",
    "detect_mime_type",
    "interpret_response",
    "extract_text",
    "MockupGenerationClient",
    "MockupSessionController",
]
