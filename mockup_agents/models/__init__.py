"""
Mockup Agents Models Package

Shared data classes for image references, canonical images and session state.
"""

from .image import CanonicalImage
from .sources import (
    BoxItem,
    RemoteImage,
    InlineImage,
    LocalImageFile,
    ImageRef,
    FileRef,
    DEFAULT_BOX,
)
from .session import (
    ViewKey,
    VariantCache,
    SessionState,
    SessionViewModel,
)

__all__ = [
    "CanonicalImage",
    "BoxItem",
    "RemoteImage",
    "InlineImage",
    "LocalImageFile",
    "ImageRef",
    "FileRef",
    "DEFAULT_BOX",
    "ViewKey",
    "VariantCache",
    "SessionState",
    "SessionViewModel",
]
