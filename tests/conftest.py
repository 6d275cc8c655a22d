from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from core.models import AuthorizationStatus, Photo, PhotoState, Size, SwipeAction
from core.services.delete_queue import DeleteQueue
from core.services.image_cache import ImageCache
from core.services.review_engine import ReviewEngine


class FakeAssetSource:
    def __init__(self, photos: list[Photo] | None = None) -> None:
        self.photos = list(photos or [])
        self.fetch_calls = 0

    async def fetch_all(self) -> list[Photo]:
        self.fetch_calls += 1
        return list(self.photos)


class FakeImageLoader:
    """Returns a string stand-in for a decoded image; ids in `missing` miss."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Size]] = []
        self.missing: set[str] = set()
        self.gate: asyncio.Event | None = None

    async def load(self, photo: Photo, target_size: Size) -> Any | None:
        self.calls.append((photo.id, target_size))
        if self.gate is not None:
            await self.gate.wait()
        if photo.id in self.missing:
            return None
        return f"image:{photo.id}:{target_size.width}x{target_size.height}"


class FakeAssetStore:
    def __init__(self) -> None:
        self.error: Exception | None = None
        self.calls: list[set[str]] = []
        self.gate: asyncio.Event | None = None

    async def delete_batch(self, photos: set[Photo]) -> None:
        self.calls.append({p.id for p in photos})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error


class FakeAuthorizationService:
    def __init__(self) -> None:
        self.status_to_return = AuthorizationStatus.NOT_DETERMINED
        self.authorization_to_grant = AuthorizationStatus.NOT_DETERMINED
        self.request_authorization_called = False

    async def status(self) -> AuthorizationStatus:
        return self.status_to_return

    async def request_authorization(self) -> AuthorizationStatus:
        self.request_authorization_called = True
        return self.authorization_to_grant


class ManualHandle:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler fake: callbacks run only when the test says so."""

    def __init__(self) -> None:
        self.handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def run_pending(self) -> int:
        ran = 0
        for handle in self.pending:
            handle.fired = True
            handle.callback()
            ran += 1
        return ran


@pytest.fixture
def photos() -> list[Photo]:
    return [Photo("photo-1"), Photo("photo-2"), Photo("photo-3")]


@pytest.fixture
def source(photos: list[Photo]) -> FakeAssetSource:
    return FakeAssetSource(photos)


@pytest.fixture
def loader() -> FakeImageLoader:
    return FakeImageLoader()


@pytest.fixture
def store() -> FakeAssetStore:
    return FakeAssetStore()


@pytest.fixture
def auth_service() -> FakeAuthorizationService:
    return FakeAuthorizationService()


@pytest.fixture
def delete_queue() -> DeleteQueue:
    return DeleteQueue()


@pytest.fixture
def image_cache() -> ImageCache:
    return ImageCache()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def engine(
    source: FakeAssetSource,
    loader: FakeImageLoader,
    store: FakeAssetStore,
    delete_queue: DeleteQueue,
    image_cache: ImageCache,
) -> ReviewEngine:
    return ReviewEngine(
        source=source,
        loader=loader,
        store=store,
        delete_queue=delete_queue,
        image_cache=image_cache,
        thumbnail_size=Size(100, 100),
        full_image_size=Size(800, 600),
    )


@pytest.fixture
async def loaded_engine(engine: ReviewEngine) -> ReviewEngine:
    await engine.load()
    return engine


@pytest.fixture
def check_partition() -> Callable[[ReviewEngine, list[str]], None]:
    """Assert each id sits in exactly one of stack, kept set and queue."""

    def _check(engine: ReviewEngine, photo_ids: list[str]) -> None:
        stack_ids = [p.id for p in engine.photos]
        queue_ids = [p.id for p in engine.photos_queued_for_deletion]
        assert len(stack_ids) == len(set(stack_ids))
        assert len(queue_ids) == len(set(queue_ids))
        for photo_id in photo_ids:
            places = [
                photo_id in stack_ids,
                engine.decision_for(photo_id) is SwipeAction.KEEP,
                photo_id in queue_ids,
            ]
            state = engine.state_of(photo_id)
            if state is PhotoState.NOT_LOADED:
                assert not any(places), photo_id
            else:
                assert sum(places) == 1, (photo_id, places)

    return _check
