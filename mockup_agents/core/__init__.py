"""
Core components for the mockup orchestrator.

This module provides the foundational pieces used by every service:
- Config: Settings, GenerationConfig and loading helpers
- Exceptions: Structured error handling
- Logger: structlog configuration and correlation context
"""

from mockup_agents.core.config import (
    GenerationConfig,
    Settings,
    DEFAULT_VIEW_KEYS,
    load_config,
    get_config,
    reset_config,
)
from mockup_agents.core.exceptions import (
    MockupError,
    ConfigError,
    ImageSourceError,
    FetchError,
    MalformedEncodingError,
    InvalidImageError,
    GenerationError,
    BlockedRequestError,
    AbnormalCompletionError,
    NoImageProducedError,
    MalformedResponseError,
    ProviderError,
    ProviderTimeoutError,
    SessionError,
    UnknownViewError,
)
from mockup_agents.core.logger import configure_logging, get_logger

__all__ = [
    # Config
    "GenerationConfig",
    "Settings",
    "DEFAULT_VIEW_KEYS",
    "load_config",
    "get_config",
    "reset_config",
    # Exceptions
    "MockupError",
    "ConfigError",
    "ImageSourceError",
    "FetchError",
    "MalformedEncodingError",
    "InvalidImageError",
    "GenerationError",
    "BlockedRequestError",
    "AbnormalCompletionError",
    "NoImageProducedError",
    "MalformedResponseError",
    "ProviderError",
    "ProviderTimeoutError",
    "SessionError",
    "UnknownViewError",
    # Logging
    "configure_logging",
    "get_logger",
]
