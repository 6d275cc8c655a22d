"""Core domain models for photo review sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class GeoLocation:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class Photo:
    """A single reviewable photo.

    Equality and hashing use `id` only; metadata never takes part in identity.
    """

    id: str
    creation_date: datetime | None = field(default=None, compare=False)
    location: GeoLocation | None = field(default=None, compare=False)
    # Backing file, when the source is file based
    file_path: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Size:
    """Target size in pixels for an image request."""

    width: int
    height: int


@dataclass(frozen=True)
class Offset:
    """2D drag offset in view units."""

    x: float = 0.0
    y: float = 0.0


ZERO_OFFSET = Offset()


class SwipeAction(Enum):
    """Decision taken for a photo."""

    KEEP = "keep"
    DELETE = "delete"

    @property
    def color(self) -> str:
        """Display colour of the decision badge."""
        return "green" if self is SwipeAction.KEEP else "red"

    @property
    def icon(self) -> str:
        """Symbol name of the decision badge."""
        return "heart.fill" if self is SwipeAction.KEEP else "trash.fill"


class PhotoState(Enum):
    """Partition a photo identifier currently belongs to."""

    UNREVIEWED = "unreviewed"
    KEPT = "kept"
    QUEUED = "queued"
    NOT_LOADED = "not_loaded"


class ImageTier(Enum):
    """Image cache tier."""

    FULL = "full"
    THUMBNAIL = "thumbnail"


class AuthorizationStatus(Enum):
    """Access level granted to the photo library."""

    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    LIMITED = "limited"
    DENIED = "denied"
    RESTRICTED = "restricted"

    @property
    def grants_access(self) -> bool:
        """True when photos may be listed (full or limited access)."""
        return self in (AuthorizationStatus.AUTHORIZED, AuthorizationStatus.LIMITED)
