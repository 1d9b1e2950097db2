"""
Configuration loading and management for the mockup orchestrator.

Environment settings are read with pydantic-settings; the optional YAML file
(config/mockup_config.yaml) overrides view lists and prompts. The result is a
GenerationConfig that is injected into the generation client and the session
controller at construction.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mockup_agents.core.exceptions import ConfigError


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "mockup_config.yaml"

DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

DEFAULT_VIEW_KEYS: List[str] = [
    "Front View",
    "Angled View",
    "Top View",
    "Logo Close-up",
    "In a Luxury Setting",
]

DEFAULT_COMPOSITE_PROMPT = (
    'Replace the "TASTY BOX" text on the first image (the box) with the second '
    "image (the logo). The logo must be placed realistically on the box's front, "
    "matching the lighting, texture, and perspective. Output ONLY the resulting image."
)

DEFAULT_ANGLE_PROMPT_TEMPLATE = (
    "Take the provided image of a product box. Generate a new image showing the "
    "exact same box and logo, but from a different angle described as: "
    '"{view_instruction}". Keep the style, lighting, and background consistent. '
    "Output only the newly generated image."
)


class Settings(BaseSettings):
    """Process settings loaded from environment variables (prefix MOCKUP_)."""

    model_config = SettingsConfigDict(
        env_prefix="MOCKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google Gemini API
    gemini_api_key: str = Field(default="", description="Gemini API key")
    gemini_model_image: str = Field(
        default=DEFAULT_MODEL, description="Image-capable Gemini model"
    )
    gemini_api_base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Gemini REST base URL"
    )

    # Requests
    request_timeout: float = Field(default=120.0, description="Provider/fetch timeout in seconds")
    max_retries: int = Field(
        default=0, description="Controller retries for transient provider failures"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    enable_structured_logging: bool = Field(
        default=False, description="Emit JSON logs instead of console output"
    )

    config_path: Optional[str] = Field(
        default=None, description="Path to mockup_config.yaml"
    )


@dataclass
class GenerationConfig:
    """
    Configuration for the generation client and session controller.

    Replaces process-wide provider state: one instance is passed to each
    client/controller at construction.
    """
    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 120.0

    # Controller retry policy; 0 disables automatic retries
    max_retries: int = 0
    retry_min_wait: float = 1.0
    retry_max_wait: float = 10.0

    view_keys: List[str] = field(default_factory=lambda: list(DEFAULT_VIEW_KEYS))
    composite_prompt: str = DEFAULT_COMPOSITE_PROMPT
    angle_prompt_template: str = DEFAULT_ANGLE_PROMPT_TEMPLATE

    def __post_init__(self) -> None:
        if not self.view_keys:
            raise ConfigError("At least one view key must be configured")
        if len(set(self.view_keys)) != len(self.view_keys):
            raise ConfigError(
                "View keys must be unique",
                details={"view_keys": list(self.view_keys)},
            )
        if "{view_instruction}" not in self.angle_prompt_template:
            raise ConfigError("angle_prompt_template must contain {view_instruction}")
        if self.max_retries < 0:
            raise ConfigError("max_retries cannot be negative")

    @property
    def endpoint(self) -> str:
        """generateContent URL for the configured model."""
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    def angle_prompt(self, view_instruction: str) -> str:
        """Render the regeneration prompt for one view."""
        return self.angle_prompt_template.format(view_instruction=view_instruction)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (API key masked)."""
        return {
            "api_key": "***" if self.api_key else "",
            "model": self.model,
            "base_url": self.base_url,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_min_wait": self.retry_min_wait,
            "retry_max_wait": self.retry_max_wait,
            "view_keys": list(self.view_keys),
            "composite_prompt": self.composite_prompt,
            "angle_prompt_template": self.angle_prompt_template,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationConfig":
        """Create from dictionary."""
        return cls(
            api_key=data.get("api_key", ""),
            model=data.get("model", DEFAULT_MODEL),
            base_url=data.get("base_url", DEFAULT_BASE_URL),
            timeout=data.get("timeout", 120.0),
            max_retries=data.get("max_retries", 0),
            retry_min_wait=data.get("retry_min_wait", 1.0),
            retry_max_wait=data.get("retry_max_wait", 10.0),
            view_keys=list(data.get("view_keys") or DEFAULT_VIEW_KEYS),
            composite_prompt=data.get("composite_prompt", DEFAULT_COMPOSITE_PROMPT),
            angle_prompt_template=data.get(
                "angle_prompt_template", DEFAULT_ANGLE_PROMPT_TEMPLATE
            ),
        )


# YAML generation keys backed by an environment setting
SETTINGS_FIELDS_BY_KEY: Dict[str, str] = {
    "model": "gemini_model_image",
    "base_url": "gemini_api_base_url",
    "timeout": "request_timeout",
    "max_retries": "max_retries",
}

# Cached config instance
_config: Optional[GenerationConfig] = None


def load_config(
    config_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> GenerationConfig:
    """
    Build a GenerationConfig from environment settings and the YAML file.

    Explicitly set environment settings win; the YAML file's ``generation``
    section fills only the fields the environment left unset. ``views``
    replaces the default view list.

    Args:
        config_path: Path to config file. If None, uses settings or default location.
        settings: Settings instance. If None, reads the environment.

    Returns:
        Loaded GenerationConfig instance.
    """
    global _config

    settings = settings or Settings()
    data: Dict[str, Any] = {
        "api_key": settings.gemini_api_key,
        "model": settings.gemini_model_image,
        "base_url": settings.gemini_api_base_url,
        "timeout": settings.request_timeout,
        "max_retries": settings.max_retries,
    }

    config_file = Path(config_path or settings.config_path or DEFAULT_CONFIG_PATH)
    if config_file.exists():
        try:
            with open(config_file, "r") as f:
                file_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Could not parse config file: {e}",
                details={"config_path": str(config_file)},
            ) from e

        generation = file_data.get("generation", {})
        for key in (
            "model",
            "base_url",
            "timeout",
            "max_retries",
            "retry_min_wait",
            "retry_max_wait",
        ):
            if generation.get(key) is None:
                continue
            if SETTINGS_FIELDS_BY_KEY.get(key) in settings.model_fields_set:
                continue
            data[key] = generation[key]

        prompts = file_data.get("prompts", {})
        if prompts.get("composite"):
            data["composite_prompt"] = prompts["composite"]
        if prompts.get("angle"):
            data["angle_prompt_template"] = prompts["angle"]

        if file_data.get("views"):
            data["view_keys"] = list(file_data["views"])

    _config = GenerationConfig.from_dict(data)
    return _config


def get_config() -> GenerationConfig:
    """
    Get the current configuration.

    Loads default config if not already loaded.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the cached config (useful for testing)."""
    global _config
    _config = None
