from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from core.constants import CARD_STACK_COUNT, THUMBNAIL_PRELOAD_COUNT
from core.models import Photo, Size
from core.services.review_engine import ReviewEngine


async def _run_image_task(engine: ReviewEngine, photo: Photo, size: Size | None, token: str) -> Any:
    """Load one image through the engine's cache; failures become None."""
    try:
        if size is None:
            return await engine.load_thumbnail(photo)
        return await engine.load_image(photo, size)
    except asyncio.CancelledError:
        raise
    except Exception as ex:  # pylint: disable=broad-exception-caught
        logger.error("Image task failed: {} | {}", token, ex)
        return None


class ImageTaskRunner:
    """Starts image loads as asyncio tasks on the interaction loop.

    Loads run concurrently with no ordering between them; results land in the
    engine's image cache. Tokens keep a fixed format:
    - Full-size preview: "single|{id}|{width}x{height}"
    - Filmstrip thumbnail: "grid|{id}|thumb"
    """

    def __init__(
        self,
        engine: ReviewEngine,
        look_ahead: int = CARD_STACK_COUNT,
        preload_count: int = THUMBNAIL_PRELOAD_COUNT,
    ) -> None:
        self._engine = engine
        self._look_ahead = max(0, int(look_ahead))
        self._preload_count = max(0, int(preload_count))
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def in_flight(self) -> int:
        """Number of loads that have not finished yet."""
        return len(self._tasks)

    def request_preview(self, photo: Photo, size: Size | None = None) -> asyncio.Task[Any]:
        """Start a full-size load for `photo`. Returns the task."""
        target = size or self._engine.full_image_size
        token = f"single|{photo.id}|{target.width}x{target.height}"
        return self._start(_run_image_task(self._engine, photo, target, token), token)

    def request_thumbnail(self, photo: Photo) -> asyncio.Task[Any]:
        """Start a thumbnail load for `photo`. Returns the task."""
        token = f"grid|{photo.id}|thumb"
        return self._start(_run_image_task(self._engine, photo, None, token), token)

    async def prefetch_stack(self) -> list[Any]:
        """Load full-size images for the cards about to be shown."""
        photos = self._engine.photos[: self._look_ahead]
        return await asyncio.gather(*(self.request_preview(p) for p in photos))

    async def prefetch_filmstrip(self) -> list[Any]:
        """Load thumbnails for the first filmstrip entries."""
        photos = self._engine.all_photos[: self._preload_count]
        return await asyncio.gather(*(self.request_thumbnail(p) for p in photos))

    def _start(self, coro: Any, token: str) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro, name=token)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
