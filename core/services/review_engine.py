"""Review engine: decision state machine and batch-commit protocol.

Every loaded photo identifier sits in exactly one partition at a time:

- unreviewed: on the review stack
- kept: in the kept set
- queued: in the delete queue

All mutating operations move an identifier between partitions without ever
leaving it in two places. Redundant or unknown calls are logged no-ops.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from core.constants import FULL_IMAGE_SIZE, THUMBNAIL_SIZE
from core.models import AuthorizationStatus, ImageTier, Photo, PhotoState, Size, SwipeAction
from core.services.interfaces import (
    AssetSource,
    AssetStore,
    AssetStoreError,
    AuthorizationService,
    CommitResult,
    DeleteQueueProtocol,
    ImageCacheProtocol,
    ImageLoader,
)


class ReviewEngine:
    """Owns the review stack and kept set, and drives queue and cache.

    The engine is single-owner: it is mutated only from the interaction event
    loop and holds no locks of its own.
    """

    def __init__(
        self,
        source: AssetSource,
        loader: ImageLoader,
        store: AssetStore,
        delete_queue: DeleteQueueProtocol,
        image_cache: ImageCacheProtocol,
        auth_service: AuthorizationService | None = None,
        thumbnail_size: Size = THUMBNAIL_SIZE,
        full_image_size: Size = FULL_IMAGE_SIZE,
    ) -> None:
        """Create a ReviewEngine.

        Args:
            source: Provides the ordered photo list on `load`.
            loader: Decodes images on cache misses.
            store: Performs the irreversible batch delete.
            delete_queue: Ordered pending-deletion collection.
            image_cache: Two-tier memory cache.
            auth_service: Optional access gate; without one access is granted.
            thumbnail_size: Size requested for filmstrip thumbnails.
            full_image_size: Default size for full-size previews.
        """
        self._source = source
        self._loader = loader
        self._store = store
        self._queue = delete_queue
        self.image_cache = image_cache
        self._auth = auth_service
        self._thumbnail_size = thumbnail_size
        self.full_image_size = full_image_size

        self._photos: list[Photo] = []
        self._all_photos: list[Photo] = []
        self._kept_ids: set[str] = set()
        self._known: dict[str, Photo] = {}
        self._committing = False

        self.authorization_status = AuthorizationStatus.NOT_DETERMINED
        self.is_loading = False
        self.error_message: str | None = None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    @property
    def photos(self) -> list[Photo]:
        """Review stack snapshot, front first."""
        return list(self._photos)

    @property
    def all_photos(self) -> list[Photo]:
        """Every photo of the session that has not been deleted."""
        return list(self._all_photos)

    @property
    def photos_queued_for_deletion(self) -> list[Photo]:
        """Queued photos in the order they were queued."""
        return self._queue.queue

    @property
    def kept_count(self) -> int:
        return len(self._kept_ids)

    @property
    def photos_to_delete_count(self) -> int:
        return self._queue.count

    @property
    def has_photos_to_delete(self) -> bool:
        return not self._queue.is_empty

    @property
    def total_reviewed(self) -> int:
        return self.kept_count + self.photos_to_delete_count

    @property
    def is_authorized(self) -> bool:
        return self.authorization_status.grants_access

    @property
    def is_committing(self) -> bool:
        return self._committing

    def decision_for(self, photo_id: str) -> SwipeAction | None:
        """Return KEEP or DELETE for decided photos, None otherwise."""
        if photo_id in self._kept_ids:
            return SwipeAction.KEEP
        if self._queue.contains(photo_id):
            return SwipeAction.DELETE
        return None

    def state_of(self, photo_id: str) -> PhotoState:
        """Return the partition currently holding `photo_id`."""
        if photo_id in self._kept_ids:
            return PhotoState.KEPT
        if self._queue.contains(photo_id):
            return PhotoState.QUEUED
        if self._stack_index(photo_id) is not None:
            return PhotoState.UNREVIEWED
        return PhotoState.NOT_LOADED

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #
    async def check_authorization(self) -> AuthorizationStatus:
        """Refresh the authorization status and load when access is granted."""
        if self._auth is None:
            self.authorization_status = AuthorizationStatus.AUTHORIZED
        else:
            self.authorization_status = await self._auth.status()
        logger.info("Authorization status: {}", self.authorization_status.value)
        if self.is_authorized:
            await self.load()
        return self.authorization_status

    async def request_authorization(self) -> AuthorizationStatus:
        """Ask for access, then load when it is granted."""
        if self._auth is None:
            self.authorization_status = AuthorizationStatus.AUTHORIZED
        else:
            self.authorization_status = await self._auth.request_authorization()
        logger.info("Authorization requested: {}", self.authorization_status.value)
        if self.is_authorized:
            await self.load()
        return self.authorization_status

    async def load(self) -> None:
        """Replace the stack and kept set from the asset source.

        Photos still in the delete queue stay queued and are not put back on
        the stack.
        """
        self.is_loading = True
        try:
            fetched = list(await self._source.fetch_all())
        finally:
            self.is_loading = False

        unique: list[Photo] = []
        seen: set[str] = set()
        for photo in fetched:
            if photo.id in seen:
                logger.warning("Duplicate photo id from source ignored: {}", photo.id)
                continue
            seen.add(photo.id)
            unique.append(photo)

        queued = self._queue.queue
        queued_ids = {p.id for p in queued}
        self._all_photos = unique
        self._photos = [p for p in unique if p.id not in queued_ids]
        self._kept_ids = set()
        self._known = {p.id: p for p in unique}
        for photo in queued:
            self._known.setdefault(photo.id, photo)
        logger.info(
            "Loaded photos: total={} stack={} queued={}",
            len(unique),
            len(self._photos),
            len(queued),
        )

    async def reset(self) -> None:
        """Forget every decision and cached image, then load again."""
        self._queue.clear()
        self._kept_ids.clear()
        self.image_cache.clear_all()
        self._photos = []
        self._all_photos = []
        self._known = {}
        self.error_message = None
        logger.info("Review session reset")
        await self.load()

    # ------------------------------------------------------------------ #
    # Images
    # ------------------------------------------------------------------ #
    async def load_image(self, photo: Photo, target_size: Size | None = None) -> Any | None:
        """Return the full-size image, from cache when present."""
        return await self._load_tier(ImageTier.FULL, photo, target_size or self.full_image_size)

    async def load_thumbnail(self, photo: Photo) -> Any | None:
        """Return the filmstrip thumbnail, from cache when present."""
        return await self._load_tier(ImageTier.THUMBNAIL, photo, self._thumbnail_size)

    async def _load_tier(self, tier: ImageTier, photo: Photo, size: Size) -> Any | None:
        cached = self.image_cache.get(tier, photo.id)
        if cached is not None:
            return cached
        image = await self._loader.load(photo, size)
        if image is None:
            logger.debug("Image miss for {} ({})", photo.id, tier.value)
            return None
        self.image_cache.put(tier, photo.id, image)
        return image

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #
    def mark_for_deletion(self, photo: Photo) -> None:
        """Queue `photo` for deletion (unreviewed or kept → queued).

        A photo that is already queued moves to the tail of the queue.
        """
        current = self._known.get(photo.id)
        if current is None:
            logger.warning("mark_for_deletion ignored for unknown photo {}", photo.id)
            return
        self._queue.remove(photo.id)
        self._kept_ids.discard(photo.id)
        self._queue.add(current)
        self._remove_from_stack(photo.id)
        logger.debug("Queued for deletion: {} (queue={})", photo.id, self._queue.count)

    def keep(self, photo: Photo) -> None:
        """Keep `photo` (unreviewed or queued → kept)."""
        if photo.id not in self._known:
            logger.warning("keep ignored for unknown photo {}", photo.id)
            return
        self._queue.remove(photo.id)
        self._kept_ids.add(photo.id)
        self._remove_from_stack(photo.id)
        logger.debug("Kept: {} (kept={})", photo.id, self.kept_count)

    def undo_last_delete(self) -> Photo | None:
        """Put the most recently queued photo back on top of the stack."""
        photo = self._queue.remove_last()
        if photo is None:
            return None
        index = self._stack_index(photo.id)
        if index is not None:
            del self._photos[index]
        self._photos.insert(0, photo)
        logger.debug("Undo delete: {}", photo.id)
        return photo

    def restore(self, photo: Photo) -> None:
        """Take `photo` out of the delete queue and keep it (queued → kept)."""
        if not self._queue.contains(photo.id):
            logger.debug("restore ignored, {} is not queued", photo.id)
            return
        self._queue.remove(photo.id)
        self._kept_ids.add(photo.id)
        logger.debug("Restored as kept: {}", photo.id)

    def move_to_front(self, photo: Photo) -> None:
        """Bring `photo` to the front of the stack.

        A photo already on the stack is rotated to the front, keeping the
        cyclic order of the others. A kept or queued photo goes back to
        unreviewed and is inserted at the front.
        """
        index = self._stack_index(photo.id)
        if index is not None:
            if index:
                self._photos = self._photos[index:] + self._photos[:index]
            return
        current = self._known.get(photo.id)
        if current is None:
            logger.warning("move_to_front ignored for unknown photo {}", photo.id)
            return
        self._kept_ids.discard(photo.id)
        self._queue.remove(photo.id)
        self._photos.insert(0, current)
        logger.debug("Moved back for review: {}", photo.id)

    # ------------------------------------------------------------------ #
    # Commit
    # ------------------------------------------------------------------ #
    async def commit_deletes(self) -> CommitResult:
        """Delete every queued photo through the asset store.

        On failure nothing is mutated and `error_message` describes the
        problem. Photos queued while the store call is pending stay queued.
        """
        if self._queue.is_empty:
            return CommitResult()
        if self._committing:
            logger.warning("Commit requested while another commit is in progress")
            return CommitResult(error="A delete is already in progress")

        snapshot = self._queue.queue
        deleted_ids = [p.id for p in snapshot]
        logger.info("Committing delete of {} photos", len(snapshot))

        self._committing = True
        try:
            await self._store.delete_batch(set(snapshot))
        except AssetStoreError as ex:
            return self._commit_failed(ex.reason)
        except OSError as ex:
            return self._commit_failed(str(ex))
        finally:
            self._committing = False

        deleted = set(deleted_ids)
        for photo_id in deleted_ids:
            self._queue.remove(photo_id)
            self.image_cache.remove_all_tiers(photo_id)
            self._known.pop(photo_id, None)
        self._photos = [p for p in self._photos if p.id not in deleted]
        self._all_photos = [p for p in self._all_photos if p.id not in deleted]
        self._kept_ids -= deleted
        self.error_message = None
        logger.info("Deleted {} photos", len(deleted_ids))
        return CommitResult(deleted_ids=deleted_ids)

    def _commit_failed(self, reason: str) -> CommitResult:
        self.error_message = f"Failed to delete photos: {reason}"
        logger.error("Batch delete failed: {}", reason)
        return CommitResult(error=self.error_message)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _stack_index(self, photo_id: str) -> int | None:
        for index, photo in enumerate(self._photos):
            if photo.id == photo_id:
                return index
        return None

    def _remove_from_stack(self, photo_id: str) -> None:
        self.image_cache.remove(ImageTier.FULL, photo_id)
        self._photos = [p for p in self._photos if p.id != photo_id]
