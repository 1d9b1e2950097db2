"""
Image Source Service

Converts image references (remote URL, inline data URL, user-supplied file)
into a CanonicalImage ready to be sent to the generation provider.
"""

from io import BytesIO
from typing import Optional, Tuple
import base64
import binascii
import re

import httpx
import structlog
from PIL import Image, UnidentifiedImageError

from mockup_agents.core.exceptions import (
    FetchError,
    InvalidImageError,
    MalformedEncodingError,
)
from mockup_agents.models.image import CanonicalImage, MIME_TYPE_PATTERN
from mockup_agents.models.sources import (
    BoxItem,
    ImageRef,
    InlineImage,
    LocalImageFile,
    RemoteImage,
)

logger = structlog.get_logger(__name__)


DATA_URL_MIME_PATTERN = re.compile(r":(.*?);")

FALLBACK_MIME_TYPE = "application/octet-stream"


def parse_data_url(data_url: str) -> Tuple[str, str]:
    """
    Split a data URL into its MIME type and base64 payload.

    Args:
        data_url: ``data:<mime>;base64,<data>``

    Returns:
        (mime_type, base64_data)

    Raises:
        MalformedEncodingError: Missing payload segment or MIME marker
    """
    segments = data_url.split(",", 1)
    if len(segments) < 2:
        raise MalformedEncodingError("Invalid data URL: missing payload segment")

    header, data = segments
    mime_match = DATA_URL_MIME_PATTERN.search(header)
    if not mime_match or not mime_match.group(1):
        raise MalformedEncodingError("Could not parse MIME type from data URL")

    return mime_match.group(1), data


def detect_mime_type(payload: bytes) -> Optional[str]:
    """Identify the image format from its bytes, or None if unrecognised."""
    try:
        with Image.open(BytesIO(payload)) as img:
            if img.format:
                return Image.MIME.get(img.format.upper())
    except (UnidentifiedImageError, OSError):
        return None
    return None


class ImageSourceService:
    """
    Image source normalizer.

    Dispatches on the source variant:
    - RemoteImage / BoxItem / plain URL string: HTTP GET
    - InlineImage / ``data:`` string: parse the data URL
    - LocalImageFile: bytes and declared MIME type, no I/O
    - CanonicalImage: returned unchanged
    """

    def __init__(
        self,
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize ImageSourceService.

        Args:
            timeout: Fetch timeout in seconds
            client: Optional shared HTTP client (not closed by this service)
        """
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def normalize(self, source: ImageRef) -> CanonicalImage:
        """
        Convert any supported image reference into a CanonicalImage.

        Raises:
            FetchError: Remote fetch failed
            MalformedEncodingError: Inline data URL could not be parsed
            InvalidImageError: Empty content or unsupported source type
        """
        if isinstance(source, CanonicalImage):
            return source
        if isinstance(source, LocalImageFile):
            return self.from_file(source)
        if isinstance(source, InlineImage):
            return self.from_data_url(source.data_url)
        if isinstance(source, RemoteImage):
            return await self.fetch(source.url)
        if isinstance(source, BoxItem):
            return await self.normalize(source.url)
        if isinstance(source, str):
            if source.startswith("data:"):
                return self.from_data_url(source)
            return await self.fetch(source)

        raise InvalidImageError(
            f"Unsupported image source: {type(source).__name__}",
            details={"source_type": type(source).__name__},
        )

    def from_data_url(self, data_url: str) -> CanonicalImage:
        """Decode an inline data URL."""
        mime_type, data = parse_data_url(data_url)
        try:
            payload = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedEncodingError(f"Could not decode data URL payload: {e}") from e

        try:
            return CanonicalImage(mime_type=mime_type, payload=payload)
        except InvalidImageError as e:
            raise MalformedEncodingError(
                f"Data URL does not describe a valid image: {e.message}",
                details=e.details,
            ) from e

    def from_file(self, file: LocalImageFile) -> CanonicalImage:
        """Wrap user-supplied file content."""
        return CanonicalImage(mime_type=file.mime_type, payload=file.content)

    async def fetch(self, url: str) -> CanonicalImage:
        """
        Download a remote image.

        The MIME type is the response Content-Type when it names a
        ``type/subtype``; otherwise it is detected from the bytes.
        """
        client = await self._get_client()

        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(
                "image_source_service.fetch.transport_error",
                url=url,
                error_type=type(e).__name__,
                error_detail=str(e),
            )
            raise FetchError(
                f"Failed to fetch image from URL: {url} ({type(e).__name__})",
                url=url,
            ) from e

        if not response.is_success:
            logger.warning(
                "image_source_service.fetch.bad_status",
                url=url,
                status_code=response.status_code,
            )
            raise FetchError(
                f"Failed to fetch image from URL: {url} (status {response.status_code})",
                url=url,
                status_code=response.status_code,
            )

        payload = response.content
        if not payload:
            raise FetchError(f"Fetched image is empty: {url}", url=url, status_code=response.status_code)

        mime_type = self._resolve_mime_type(response.headers.get("content-type"), payload)
        logger.debug(
            "image_source_service.fetch.succeeded",
            url=url,
            mime_type=mime_type,
            size_bytes=len(payload),
        )
        return CanonicalImage(mime_type=mime_type, payload=payload)

    @staticmethod
    def _resolve_mime_type(content_type: Optional[str], payload: bytes) -> str:
        declared = (content_type or "").split(";", 1)[0].strip().lower()
        if declared.startswith("image/") and MIME_TYPE_PATTERN.match(declared):
            return declared
        detected = detect_mime_type(payload)
        if detected:
            return detected
        if declared and MIME_TYPE_PATTERN.match(declared):
            return declared
        return FALLBACK_MIME_TYPE

    async def __aenter__(self) -> "ImageSourceService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
