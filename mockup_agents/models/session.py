"""
Session state models.

Used by MockupSessionController to track the active base/logo pairing,
the cache of generated view variants, the selected view and the
in-flight request.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from mockup_agents.core.config import DEFAULT_VIEW_KEYS
from mockup_agents.core.exceptions import MockupError
from mockup_agents.models.image import CanonicalImage
from mockup_agents.models.sources import BoxItem, ImageRef, FileRef


ViewKey = str

DisplayedImage = Union[CanonicalImage, ImageRef]


class VariantCache:
    """
    Insertion-ordered map of view key to generated image.

    Holds at most one image per view. ``first()`` is the first variant ever
    stored since the last ``clear()``; it is the base for regenerations.
    """

    def __init__(self) -> None:
        self._entries: "OrderedDict[ViewKey, CanonicalImage]" = OrderedDict()

    def store(self, view_key: ViewKey, image: CanonicalImage) -> None:
        """Insert or replace the variant for ``view_key``."""
        self._entries[view_key] = image

    def get(self, view_key: ViewKey) -> Optional[CanonicalImage]:
        return self._entries.get(view_key)

    def first(self) -> Optional[Tuple[ViewKey, CanonicalImage]]:
        """First inserted (view key, image) pair, or None when empty."""
        for item in self._entries.items():
            return item
        return None

    def keys(self) -> List[ViewKey]:
        return list(self._entries.keys())

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> Dict[ViewKey, CanonicalImage]:
        """Shallow copy preserving insertion order."""
        return dict(self._entries)

    def __contains__(self, view_key: object) -> bool:
        return view_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ViewKey]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"VariantCache(keys={self.keys()!r})"


@dataclass
class SessionState:
    """
    Mutable state of one user session.

    Owned exclusively by the session controller.
    """
    base_image: Optional[ImageRef] = None
    logo: Optional[FileRef] = None
    cache: VariantCache = field(default_factory=VariantCache)
    selected_view: Optional[ViewKey] = None
    pending: bool = False
    pending_message: Optional[str] = None
    last_error: Optional[MockupError] = None

    @property
    def is_active(self) -> bool:
        """A base image and logo are selected."""
        return self.base_image is not None and self.logo is not None

    def displayed_image(self) -> Optional[DisplayedImage]:
        """
        Image to render for the current state.

        Selected variant, else the first cached variant, else the base
        image reference. None only when no session has been started.
        """
        if self.selected_view is not None:
            selected = self.cache.get(self.selected_view)
            if selected is not None:
                return selected
        first = self.cache.first()
        if first is not None:
            return first[1]
        return self.base_image

    def clear(self) -> None:
        """Return to the pre-start state."""
        self.base_image = None
        self.logo = None
        self.cache.clear()
        self.selected_view = None
        self.pending = False
        self.pending_message = None
        self.last_error = None


@dataclass
class SessionViewModel:
    """Read-only snapshot for presentation collaborators."""
    displayed_image: Optional[DisplayedImage] = None
    is_active: bool = False
    pending: bool = False
    pending_message: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    selected_view: Optional[ViewKey] = None
    selected_index: Optional[int] = None
    generated_views: List[ViewKey] = field(default_factory=list)
    view_keys: List[ViewKey] = field(default_factory=lambda: list(DEFAULT_VIEW_KEYS))

    @property
    def displayed_image_url(self) -> Optional[str]:
        """Displayed image as a URL (data URL for generated variants)."""
        image = self.displayed_image
        if image is None:
            return None
        if isinstance(image, CanonicalImage):
            return image.to_data_url()
        if isinstance(image, BoxItem):
            return image.url
        if isinstance(image, str):
            return image
        url = getattr(image, "url", None) or getattr(image, "data_url", None)
        return url

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "displayed_image_url": self.displayed_image_url,
            "is_active": self.is_active,
            "pending": self.pending,
            "pending_message": self.pending_message,
            "error_message": self.error_message,
            "error_code": self.error_code,
            "selected_view": self.selected_view,
            "selected_index": self.selected_index,
            "generated_views": list(self.generated_views),
            "view_keys": list(self.view_keys),
        }
