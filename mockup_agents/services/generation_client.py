"""
Mockup Generation Client

Issues the two generation operations against the Gemini image model:
compositing a logo onto a base box image, and regenerating an existing
mockup from a new viewpoint.

Both operations are stateless request/response calls. Normalizer and
interpreter failures propagate unchanged; retry policy belongs to the
session controller.
"""

from typing import Any, Dict, List, Optional
import time

import httpx
import structlog

from mockup_agents.core.config import GenerationConfig, get_config
from mockup_agents.core.exceptions import (
    ConfigError,
    ProviderError,
    ProviderTimeoutError,
)
from mockup_agents.models.image import CanonicalImage
from mockup_agents.models.sources import FileRef, ImageRef
from mockup_agents.services.image_source_service import ImageSourceService
from mockup_agents.services.response_interpreter import interpret_response

logger = structlog.get_logger(__name__)


RESPONSE_MODALITIES = ["IMAGE", "TEXT"]


class MockupGenerationClient:
    """
    Client for the image-generation provider.

    Features:
    - Configuration injected at construction (API key, model, endpoint)
    - Inputs normalized through ImageSourceService
    - Responses classified by interpret_response
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        source_service: Optional[ImageSourceService] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize MockupGenerationClient.

        Args:
            config: Generation config. If None, uses the loaded default.
            source_service: Normalizer for request inputs
            client: Optional shared HTTP client (not closed by this client)
        """
        self.config = config or get_config()
        self._client = client
        self._owns_client = client is None
        self.source_service = source_service or ImageSourceService(
            timeout=self.config.timeout,
            client=client,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close owned HTTP clients."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
        await self.source_service.close()

    def build_payload(self, parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Request body for generateContent."""
        return {
            "contents": [{"parts": parts}],
            "generationConfig": {"responseModalities": list(RESPONSE_MODALITIES)},
        }

    async def composite_logo_onto_base(
        self,
        base: ImageRef,
        logo: FileRef,
    ) -> CanonicalImage:
        """
        Place the logo on the base box image.

        Args:
            base: Box image (remote URL, data URL, BoxItem, file or canonical image)
            logo: User-supplied logo file

        Returns:
            Generated mockup image
        """
        base_image = await self.source_service.normalize(base)
        logo_image = await self.source_service.normalize(logo)

        parts = [
            base_image.to_inline_part(),
            logo_image.to_inline_part(),
            {"text": self.config.composite_prompt},
        ]
        return await self._generate(parts, operation="composite")

    async def regenerate_from_angle(
        self,
        base_generated: CanonicalImage,
        view_instruction: str,
    ) -> CanonicalImage:
        """
        Render an existing mockup from another viewpoint.

        Args:
            base_generated: Previously generated mockup
            view_instruction: Textual description of the new view

        Returns:
            Generated image for the requested view
        """
        base_image = await self.source_service.normalize(base_generated)

        parts = [
            base_image.to_inline_part(),
            {"text": self.config.angle_prompt(view_instruction)},
        ]
        return await self._generate(parts, operation="regenerate", view_instruction=view_instruction)

    async def _generate(
        self,
        parts: List[Dict[str, Any]],
        operation: str,
        **log_context: Any,
    ) -> CanonicalImage:
        """Send one generateContent request and interpret the reply."""
        if not self.config.api_key:
            raise ConfigError("No Gemini API key configured")

        client = await self._get_client()
        payload = self.build_payload(parts)

        logger.info(
            "generation_client.request.sent",
            operation=operation,
            model=self.config.model,
            part_count=len(parts),
            **log_context,
        )
        start_time = time.time()

        try:
            response = await client.post(
                self.config.endpoint,
                headers={"x-goog-api-key": self.config.api_key},
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"Gemini request timed out after {self.config.timeout}s"
            ) from e
        except httpx.TransportError as e:
            raise ProviderError(
                f"Gemini request failed: {type(e).__name__}: {e}",
                transient=True,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)

        if response.status_code != 200:
            error_body = response.text
            try:
                error_msg = response.json().get("error", {}).get("message", error_body)
            except (ValueError, AttributeError):
                error_msg = error_body
            logger.error(
                "generation_client.request.failed",
                operation=operation,
                status_code=response.status_code,
                latency_ms=latency_ms,
            )
            raise ProviderError(
                f"Gemini API error ({response.status_code}): {error_msg}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                "generation_client.response.not_json",
                operation=operation,
                latency_ms=latency_ms,
            )
            raise ProviderError(
                "Gemini returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        image = interpret_response(body)
        logger.info(
            "generation_client.request.succeeded",
            operation=operation,
            latency_ms=latency_ms,
            mime_type=image.mime_type,
        )
        return image

    async def __aenter__(self) -> "MockupGenerationClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
