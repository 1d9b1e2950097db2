"""
Canonical in-memory image representation.

Produced by the image source normalizer and the provider response
interpreter; consumed by the generation client and presentation layers.
"""

from dataclasses import dataclass
from typing import Any, Dict
import base64
import re

from mockup_agents.core.exceptions import InvalidImageError


MIME_TYPE_PATTERN = re.compile(r"^[\w.+-]+/[\w.+-]+$")


@dataclass(frozen=True)
class CanonicalImage:
    """MIME type plus raw bytes."""
    mime_type: str
    payload: bytes

    def __post_init__(self) -> None:
        if not MIME_TYPE_PATTERN.match(self.mime_type or ""):
            raise InvalidImageError(
                f"Invalid MIME type: {self.mime_type!r}",
                details={"mime_type": self.mime_type},
            )
        if not self.payload:
            raise InvalidImageError("Image payload is empty")

    @classmethod
    def from_base64(cls, mime_type: str, data: str) -> "CanonicalImage":
        """Build from a base64 string as carried in provider inline parts."""
        return cls(mime_type=mime_type, payload=base64.b64decode(data))

    @property
    def base64_data(self) -> str:
        """Payload encoded as base64 text."""
        return base64.b64encode(self.payload).decode("ascii")

    @property
    def is_image(self) -> bool:
        """True for image/* MIME types."""
        return self.mime_type.startswith("image/")

    def to_data_url(self) -> str:
        """Render as a data URL for display collaborators."""
        return f"data:{self.mime_type};base64,{self.base64_data}"

    def to_inline_part(self) -> Dict[str, Any]:
        """Render as a provider request part."""
        return {"inlineData": {"mimeType": self.mime_type, "data": self.base64_data}}

    def __repr__(self) -> str:
        return f"CanonicalImage(mime_type={self.mime_type!r}, size={len(self.payload)})"
