"""View-model for the top card of the review stack.

Tracks the transient drag state of the top card and sequences a swipe into a
decision: the card first plays its exit animation, and only when that has
finished is the decision handed to the review engine.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import itertools
import weakref

from loguru import logger

from core import constants
from core.models import ZERO_OFFSET, Offset, Photo, SwipeAction
from core.services.interfaces import Scheduler, TimerHandle
from core.services.review_engine import ReviewEngine
from infrastructure.scheduling import AsyncioScheduler


@dataclass(frozen=True)
class SwipeConfig:
    """Gesture and animation tuning."""

    threshold: float = constants.SWIPE_THRESHOLD
    animation_duration: float = constants.SWIPE_ANIMATION_DURATION
    offscreen_offset: float = constants.SWIPE_OFFSCREEN_OFFSET
    max_rotation: float = constants.SWIPE_MAX_ROTATION
    rotation_divisor: float = constants.SWIPE_ROTATION_DIVISOR

    @classmethod
    def from_settings(cls, settings: object | None) -> SwipeConfig:
        """Build from `swipe.*` keys of a settings reader; bad values keep defaults."""
        if settings is None:
            return cls()
        values: dict[str, float] = {}
        for name in (
            "threshold",
            "animation_duration",
            "offscreen_offset",
            "max_rotation",
            "rotation_divisor",
        ):
            raw = settings.get(f"swipe.{name}")  # type: ignore[attr-defined]
            if raw is None:
                continue
            try:
                values[name] = float(raw)
            except (TypeError, ValueError):
                logger.warning("Invalid swipe.{} in settings: {}", name, raw)
        if values.get("rotation_divisor") == 0:
            values.pop("rotation_divisor")
        return cls(**values)


@dataclass(frozen=True)
class ExitToken:
    """Identifies one in-flight exit animation."""

    serial: int
    action: SwipeAction
    photo: Photo


class CardStackCoordinator:
    """Drag and swipe sequencing for the top card.

    The engine is held through a weak reference and the engine never refers
    back to the coordinator. Decisions reach the engine only from `resolve`,
    which the scheduler calls after the exit animation duration.
    """

    def __init__(
        self,
        engine: ReviewEngine,
        scheduler: Scheduler | None = None,
        config: SwipeConfig | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Create a CardStackCoordinator.

        Args:
            engine: Review engine receiving the decisions (not owned).
            scheduler: Runs the deferred resolve on the interaction loop;
                defaults to the running asyncio loop.
            config: Gesture and animation tuning.
            on_change: Called whenever offset or rotation change.
        """
        self._engine_ref = weakref.ref(engine)
        self._scheduler = scheduler or AsyncioScheduler()
        self.config = config or SwipeConfig()
        self._on_change = on_change
        self._serials = itertools.count(1)
        self._pending: ExitToken | None = None
        self._pending_handle: TimerHandle | None = None

        self.offset: Offset = ZERO_OFFSET
        self.rotation: float = 0.0

    @property
    def engine(self) -> ReviewEngine | None:
        return self._engine_ref()

    @property
    def is_animating(self) -> bool:
        """True while an exit animation is waiting to resolve."""
        return self._pending is not None

    @property
    def pending_token(self) -> ExitToken | None:
        return self._pending

    # Drag tracking
    def handle_drag_changed(self, translation: Offset) -> None:
        """Follow the pointer; nothing is committed while dragging."""
        if self.is_animating:
            return
        self._set_position(translation, translation.x / self.config.rotation_divisor)

    def handle_drag_ended(self, translation: Offset, photo: Photo) -> ExitToken | None:
        """Resolve a released drag into an exit animation or a snap back.

        Returns:
            The exit token when the release crossed the threshold, else None.
        """
        if self.is_animating:
            return None
        if translation.x > self.config.threshold:
            return self.begin_exit_animation(SwipeAction.KEEP, photo)
        if translation.x < -self.config.threshold:
            return self.begin_exit_animation(SwipeAction.DELETE, photo)
        self.reset_position()
        return None

    # Two-phase swipe
    def begin_exit_animation(self, action: SwipeAction, photo: Photo) -> ExitToken:
        """Move the card off-screen and schedule the decision.

        Any exit already in flight is cancelled without committing.
        """
        self.cancel_pending()
        direction = 1.0 if action is SwipeAction.KEEP else -1.0
        token = ExitToken(next(self._serials), action, photo)
        self._pending = token
        self._set_position(
            Offset(direction * self.config.offscreen_offset, 0.0),
            direction * self.config.max_rotation,
        )
        self._pending_handle = self._scheduler.call_later(
            self.config.animation_duration, lambda: self.resolve(token)
        )
        logger.debug("Exit animation {} started: {} {}", token.serial, action.value, photo.id)
        return token

    def resolve(self, token: ExitToken) -> bool:
        """Commit the decision of a finished exit animation.

        Returns:
            True when the engine received the decision; stale or repeated
            tokens return False.
        """
        if self._pending is None or token.serial != self._pending.serial:
            return False
        self._pending = None
        self._pending_handle = None

        engine = self.engine
        if engine is None:
            logger.debug("Exit {} resolved after the engine went away", token.serial)
        elif token.action is SwipeAction.KEEP:
            engine.keep(token.photo)
        else:
            engine.mark_for_deletion(token.photo)
        self.reset_position()
        return engine is not None

    def cancel_pending(self) -> None:
        """Abandon an in-flight exit without touching the engine."""
        if self._pending_handle is not None:
            self._pending_handle.cancel()
        if self._pending is not None:
            logger.debug("Exit animation {} cancelled", self._pending.serial)
        self._pending = None
        self._pending_handle = None

    def reset_position(self) -> None:
        """Snap the card back to rest."""
        self._set_position(ZERO_OFFSET, 0.0)

    # Filmstrip
    def jump_to_photo(self, photo: Photo) -> None:
        """Bring a filmstrip selection to the top of the stack."""
        engine = self.engine
        if engine is not None:
            engine.move_to_front(photo)

    def _set_position(self, offset: Offset, rotation: float) -> None:
        self.offset = offset
        self.rotation = rotation
        if self._on_change is not None:
            self._on_change()
