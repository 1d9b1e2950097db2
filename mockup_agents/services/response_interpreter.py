"""
Provider response interpreter.

Turns a Gemini ``generateContent`` response into a CanonicalImage or a
classified GenerationError. The provider signals "no image" through three
independent channels; they are checked in a fixed order so callers get a
single failure type with the most specific reason:

1. promptFeedback.blockReason   -> BlockedRequestError
2. first inline image part      -> CanonicalImage (success)
3. abnormal finishReason        -> AbnormalCompletionError
4. anything else                -> NoImageProducedError (with model text)

A reply that is not a JSON object raises MalformedResponseError; candidates,
contents and parts that are not objects are ignored.

Step 2 scans every inline part of every candidate. A part whose payload is
empty or not valid base64 is skipped and the next inline part in the same
candidate is tried, rather than taking only the first inline part of each
candidate.
"""

from typing import Any, Dict, List, Optional
import binascii

import structlog

from mockup_agents.core.exceptions import (
    AbnormalCompletionError,
    BlockedRequestError,
    InvalidImageError,
    MalformedResponseError,
    NoImageProducedError,
)
from mockup_agents.models.image import CanonicalImage

logger = structlog.get_logger(__name__)


NORMAL_FINISH_REASON = "STOP"


def _field(data: Dict[str, Any], camel: str, snake: str) -> Any:
    """Read a key accepting both REST (camelCase) and SDK (snake_case) spellings."""
    if camel in data:
        return data[camel]
    return data.get(snake)


def _candidates(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    candidates = response.get("candidates")
    if not isinstance(candidates, list):
        return []
    return [candidate for candidate in candidates if isinstance(candidate, dict)]


def _candidate_parts(candidate: Dict[str, Any]) -> List[Dict[str, Any]]:
    content = candidate.get("content")
    if not isinstance(content, dict):
        return []
    parts = content.get("parts")
    if not isinstance(parts, list):
        return []
    return [part for part in parts if isinstance(part, dict)]


def extract_text(response: Dict[str, Any]) -> Optional[str]:
    """Concatenated text parts of the first candidate, stripped; None if empty."""
    candidates = _candidates(response)
    if not candidates:
        return None
    texts = [
        part["text"]
        for part in _candidate_parts(candidates[0])
        if isinstance(part.get("text"), str)
    ]
    text = "".join(texts).strip()
    return text or None


def interpret_response(response: Dict[str, Any]) -> CanonicalImage:
    """
    Interpret a provider response.

    Args:
        response: Decoded JSON body of a generateContent call

    Returns:
        The first generated image

    Raises:
        BlockedRequestError: Request was rejected before generation
        AbnormalCompletionError: Generation stopped for a non-normal reason
        NoImageProducedError: Only text (or nothing) came back
        MalformedResponseError: The reply is not a JSON object
    """
    if not isinstance(response, dict):
        raise MalformedResponseError(
            f"Unexpected provider response type: {type(response).__name__}",
            details={"response_type": type(response).__name__},
        )

    feedback = _field(response, "promptFeedback", "prompt_feedback")
    if not isinstance(feedback, dict):
        feedback = {}
    block_reason = _field(feedback, "blockReason", "block_reason")
    if block_reason:
        block_message = _field(feedback, "blockReasonMessage", "block_reason_message")
        logger.warning(
            "response_interpreter.request_blocked",
            block_reason=block_reason,
        )
        message = f"The request was blocked. Reason: {block_reason}."
        if block_message:
            message = f"{message} {block_message}"
        raise BlockedRequestError(
            message,
            reason=block_reason,
            block_message=block_message,
        )

    candidates = _candidates(response)
    for index, candidate in enumerate(candidates):
        for part in _candidate_parts(candidate):
            inline = _field(part, "inlineData", "inline_data")
            if not isinstance(inline, dict) or not inline:
                continue
            mime_type = _field(inline, "mimeType", "mime_type")
            data = inline.get("data")
            try:
                image = CanonicalImage.from_base64(mime_type, data)
            except (binascii.Error, ValueError, TypeError, InvalidImageError) as e:
                logger.warning(
                    "response_interpreter.inline_part_unusable",
                    candidate_index=index,
                    error_detail=str(e),
                )
                continue
            logger.debug(
                "response_interpreter.image_found",
                candidate_index=index,
                mime_type=image.mime_type,
                size_bytes=len(image.payload),
            )
            return image

    finish_reason = _field(candidates[0], "finishReason", "finish_reason") if candidates else None
    if finish_reason and finish_reason != NORMAL_FINISH_REASON:
        logger.warning(
            "response_interpreter.abnormal_finish",
            finish_reason=finish_reason,
        )
        raise AbnormalCompletionError(
            f"Image generation stopped unexpectedly. Reason: {finish_reason}. "
            "This is often related to safety settings.",
            finish_reason=finish_reason,
        )

    text = extract_text(response)
    logger.warning(
        "response_interpreter.no_image",
        has_text=text is not None,
        candidate_count=len(candidates),
    )
    if text:
        message = f'The model did not return an image. It replied with text: "{text}"'
    else:
        message = (
            "The model did not return an image. This can happen because of safety "
            "filters or when the request is too complex."
        )
    raise NoImageProducedError(message, text=text)
