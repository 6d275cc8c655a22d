"""
Review session constants centralized for reuse across modules.

Every value here is a default; `settings.json` may override it through the
dotted keys noted beside each constant.
"""

from __future__ import annotations

from core.models import Size

# Swipe gesture (swipe.*)
SWIPE_THRESHOLD: float = 100.0  # horizontal units needed to commit a decision
SWIPE_ANIMATION_DURATION: float = 0.3  # seconds
SWIPE_OFFSCREEN_OFFSET: float = 500.0
SWIPE_MAX_ROTATION: float = 15.0  # degrees at the end of an exit
SWIPE_ROTATION_DIVISOR: float = 20.0  # rotation = offset.x / divisor

# Thumbnails / filmstrip (thumbnail.*)
THUMBNAIL_SIZE: Size = Size(100, 100)
THUMBNAIL_PRELOAD_COUNT: int = 20

# Card stack (card.*)
CARD_STACK_COUNT: int = 3  # cards rendered, also the full-size look-ahead

# Full-size preview request (image.full_size)
FULL_IMAGE_SIZE: Size = Size(2048, 2048)

# File types the folder source lists
IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff", ".webp", ".heic", ".heif"}
)
