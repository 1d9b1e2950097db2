"""
Mockup Session Controller

Stateful core of the orchestrator. Owns one SessionState and drives it
through three transitions:

- start(base, logo): composite the logo onto the box and seed the cache
  with the first view. On failure the session is discarded.
- select_view(index_or_key): switch to a cached view immediately, or
  regenerate the missing view from the first cached variant. On failure
  the selection rolls back and the cache is untouched.
- reset(): return to the pre-start state.

Requests are single-flight: while one is pending, start and select_view
calls are ignored rather than queued.
"""

from typing import Any, Awaitable, Callable, List, Optional, Union
import uuid

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from mockup_agents.core.config import GenerationConfig, get_config
from mockup_agents.core.exceptions import (
    InvalidImageError,
    MockupError,
    ProviderError,
    UnknownViewError,
)
from mockup_agents.core.logger import clear_correlation_context, set_correlation_context
from mockup_agents.models.image import CanonicalImage
from mockup_agents.models.session import (
    DisplayedImage,
    SessionState,
    SessionViewModel,
    ViewKey,
)
from mockup_agents.models.sources import BoxItem, FileRef, ImageRef, LocalImageFile
from mockup_agents.services.generation_client import MockupGenerationClient

logger = structlog.get_logger(__name__)


def is_transient_failure(error: BaseException) -> bool:
    """Provider failures that may succeed on a later attempt."""
    return isinstance(error, ProviderError) and error.transient


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "session_controller.generation.retrying",
        attempt=retry_state.attempt_number,
        error_code=getattr(error, "error_code", None),
    )


class MockupSessionController:
    """
    Variant cache and session state machine for one user session.

    Independent sessions use independent controller instances.
    """

    def __init__(
        self,
        client: Optional[MockupGenerationClient] = None,
        config: Optional[GenerationConfig] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initialize the controller.

        Args:
            client: Generation client. If None, one is built from config.
            config: Generation config. Defaults to the client's config.
            session_id: Identifier bound to log entries of this session
        """
        if config is None:
            config = client.config if client is not None else get_config()
        self.config = config
        self.client = client or MockupGenerationClient(config=config)
        self.session_id = session_id or uuid.uuid4().hex
        self._state = SessionState()
        # Bumped on start/reset so results of abandoned requests are dropped
        self._epoch = 0

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def view_keys(self) -> List[ViewKey]:
        return list(self.config.view_keys)

    @property
    def first_view(self) -> ViewKey:
        return self.config.view_keys[0]

    def resolve_view(self, index_or_key: Union[int, ViewKey]) -> ViewKey:
        """
        Map a view index or key to a recognised view key.

        Raises:
            UnknownViewError: Index out of range or key not configured
        """
        if isinstance(index_or_key, int) and not isinstance(index_or_key, bool):
            if 0 <= index_or_key < len(self.config.view_keys):
                return self.config.view_keys[index_or_key]
            raise UnknownViewError(
                f"View index out of range: {index_or_key}",
                details={"index": index_or_key, "view_count": len(self.config.view_keys)},
            )
        if index_or_key in self.config.view_keys:
            return index_or_key
        raise UnknownViewError(
            f"Unknown view: {index_or_key!r}",
            details={"view_key": index_or_key, "view_keys": self.view_keys},
        )

    def displayed_image(self) -> Optional[DisplayedImage]:
        """Selected variant, else first variant, else base image reference."""
        return self._state.displayed_image()

    def view_model(self) -> SessionViewModel:
        """Snapshot of the state for presentation collaborators."""
        state = self._state
        selected_index = None
        if state.selected_view in self.config.view_keys:
            selected_index = self.config.view_keys.index(state.selected_view)
        return SessionViewModel(
            displayed_image=state.displayed_image(),
            is_active=state.is_active,
            pending=state.pending,
            pending_message=state.pending_message,
            error_message=state.last_error.message if state.last_error else None,
            error_code=state.last_error.error_code if state.last_error else None,
            selected_view=state.selected_view,
            selected_index=selected_index,
            generated_views=state.cache.keys(),
            view_keys=self.view_keys,
        )

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def start(self, base: ImageRef, logo: FileRef) -> bool:
        """
        Begin a session with a base box image and a logo.

        Returns:
            True if the mockup was generated, False if the call was
            ignored (request pending) or failed (see state.last_error).
        """
        state = self._state
        if state.pending:
            logger.info(
                "session_controller.start.ignored",
                session_id=self.session_id,
                reason="pending",
            )
            return False

        if isinstance(logo, LocalImageFile) and not logo.is_image:
            state.last_error = InvalidImageError(
                "Please select a valid image file (PNG, JPG, etc.).",
                details={"mime_type": logo.mime_type, "name": logo.name},
            )
            logger.warning(
                "session_controller.start.rejected",
                session_id=self.session_id,
                mime_type=logo.mime_type,
            )
            return False

        self._epoch += 1
        epoch = self._epoch
        state.base_image = base
        state.logo = logo
        state.cache.clear()
        state.selected_view = None
        state.last_error = None
        state.pending = True
        state.pending_message = f"Placing your logo on the {self._describe_base(base)}..."

        set_correlation_context(session_id=self.session_id, view_key=self.first_view)
        logger.info("session_controller.start.requested", session_id=self.session_id)

        try:
            image = await self._generate(self.client.composite_logo_onto_base, base, logo)
        except MockupError as e:
            if epoch != self._epoch:
                return False
            state.base_image = None
            state.logo = None
            state.cache.clear()
            state.selected_view = None
            state.last_error = e
            logger.warning(
                "session_controller.start.failed",
                session_id=self.session_id,
                error_code=e.error_code,
                error_detail=e.message,
            )
            return False
        finally:
            if epoch == self._epoch:
                state.pending = False
                state.pending_message = None
            clear_correlation_context()

        if epoch != self._epoch:
            logger.info("session_controller.start.discarded", session_id=self.session_id)
            return False

        state.cache.store(self.first_view, image)
        state.selected_view = self.first_view
        logger.info(
            "session_controller.start.succeeded",
            session_id=self.session_id,
            view_key=self.first_view,
        )
        return True

    async def select_view(self, index_or_key: Union[int, ViewKey]) -> bool:
        """
        Switch to a view, generating it if it is not cached yet.

        Returns:
            True if the selection changed, False if the call was ignored
            or the regeneration failed (see state.last_error).

        Raises:
            UnknownViewError: index_or_key is not a recognised view
        """
        target = self.resolve_view(index_or_key)
        state = self._state

        if state.pending or target == state.selected_view or not state.is_active:
            logger.debug(
                "session_controller.select_view.ignored",
                session_id=self.session_id,
                target=target,
                pending=state.pending,
            )
            return False

        if target in state.cache:
            state.selected_view = target
            logger.info(
                "session_controller.select_view.cache_hit",
                session_id=self.session_id,
                view_key=target,
            )
            return True

        first = state.cache.first()
        if first is None:
            return False
        base_generated = first[1]

        epoch = self._epoch
        previous_view = state.selected_view
        state.last_error = None
        state.pending = True
        state.pending_message = f'Changing the view to "{target}"...'
        state.selected_view = target

        set_correlation_context(session_id=self.session_id, view_key=target)
        logger.info(
            "session_controller.select_view.cache_miss",
            session_id=self.session_id,
            previous_view=previous_view,
            base_view=first[0],
        )

        try:
            image = await self._generate(self.client.regenerate_from_angle, base_generated, target)
        except MockupError as e:
            if epoch == self._epoch:
                state.selected_view = previous_view
                state.last_error = e
                logger.warning(
                    "session_controller.select_view.failed",
                    session_id=self.session_id,
                    error_code=e.error_code,
                    error_detail=e.message,
                    rolled_back_to=previous_view,
                )
            return False
        finally:
            if epoch == self._epoch:
                state.pending = False
                state.pending_message = None
            clear_correlation_context()

        if epoch != self._epoch:
            logger.info("session_controller.select_view.discarded", session_id=self.session_id)
            return False

        state.cache.store(target, image)
        logger.info(
            "session_controller.select_view.succeeded",
            session_id=self.session_id,
            view_key=target,
            cached_views=len(state.cache),
        )
        return True

    async def next_view(self) -> bool:
        """Select the view after the current one, wrapping around."""
        return await self.select_view(self._adjacent_index(1))

    async def previous_view(self) -> bool:
        """Select the view before the current one, wrapping around."""
        return await self.select_view(self._adjacent_index(-1))

    def reset(self) -> None:
        """Discard the session and any in-flight result."""
        self._epoch += 1
        self._state.clear()
        logger.info("session_controller.reset", session_id=self.session_id)

    async def close(self) -> None:
        """Close the underlying generation client."""
        await self.client.close()

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _generate(
        self,
        operation: Callable[..., Awaitable[CanonicalImage]],
        *args: Any,
    ) -> CanonicalImage:
        """Run one generation call under the configured retry policy."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_exponential(
                multiplier=1,
                min=self.config.retry_min_wait,
                max=self.config.retry_max_wait,
            ),
            retry=retry_if_exception(is_transient_failure),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                image = await operation(*args)
        return image

    def _adjacent_index(self, step: int) -> int:
        selected = self._state.selected_view
        if selected not in self.config.view_keys:
            return 0
        return (self.config.view_keys.index(selected) + step) % len(self.config.view_keys)

    @staticmethod
    def _describe_base(base: ImageRef) -> str:
        if isinstance(base, BoxItem):
            return base.name
        return "box"

    async def __aenter__(self) -> "MockupSessionController":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
