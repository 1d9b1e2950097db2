"""
Image source references accepted by the normalizer.

A source is one of: a remote URL, an inline data URL, or a user-supplied
file already read into memory. Plain strings are also accepted by the
normalizer (``data:`` prefix means inline, anything else is fetched).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import mimetypes

from mockup_agents.models.image import CanonicalImage


@dataclass(frozen=True)
class RemoteImage:
    """Image reachable over HTTP(S)."""
    url: str


@dataclass(frozen=True)
class InlineImage:
    """Image embedded as a ``data:<mime>;base64,<data>`` URL."""
    data_url: str


@dataclass(frozen=True)
class LocalImageFile:
    """User-supplied file content with its declared MIME type."""
    content: bytes
    mime_type: str
    name: str = ""

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> "LocalImageFile":
        """
        Read a file from disk.

        The MIME type is guessed from the file extension when not given.
        """
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            content=path.read_bytes(),
            mime_type=mime_type or guessed or "application/octet-stream",
            name=path.name,
        )

    def __repr__(self) -> str:
        return (
            f"LocalImageFile(name={self.name!r}, mime_type={self.mime_type!r}, "
            f"size={len(self.content)})"
        )


@dataclass(frozen=True)
class BoxItem:
    """A base box image offered to the user."""
    id: str
    name: str
    url: str


ImageRef = Union[BoxItem, RemoteImage, InlineImage, LocalImageFile, CanonicalImage, str]
FileRef = Union[LocalImageFile, CanonicalImage]


DEFAULT_BOX = BoxItem(
    id="cardboard-box",
    name="Cardboard Gift Box",
    url="https://i.imgur.com/8N4R42t.jpeg",
)
