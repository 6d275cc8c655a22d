"""Image loading for the review engine.

Decodes with Qt's `QImageReader` (scaled while reading) and falls back to
Pillow, which also covers HEIC/HEIF when pillow-heif is installed. Decoding
runs in a worker thread so the interaction loop never blocks on it.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from PIL import Image, ImageOps
from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QImage, QImageReader
from loguru import logger

from core.models import Photo, Size
from infrastructure.utils import PIL_HEIF_AVAILABLE

HEIF_SUFFIXES = frozenset({".heic", ".heif"})


def _fit_within(width: int, height: int, bound: Size) -> tuple[int, int]:
    """Scale (width, height) to fit `bound`, keeping aspect; never upscale."""
    if width <= 0 or height <= 0 or bound.width <= 0 or bound.height <= 0:
        return width, height
    scale = min(bound.width / width, bound.height / height, 1.0)
    return max(1, int(width * scale)), max(1, int(height * scale))


class QtImageLoader:
    """Image loader producing `QImage` objects for a Qt host."""

    def __init__(self) -> None:
        self._pillow_heif_available = bool(PIL_HEIF_AVAILABLE)

    async def load(self, photo: Photo, target_size: Size) -> QImage | None:
        """Decode `photo` bounded by `target_size`; None when it cannot be read."""
        if not photo.file_path:
            logger.debug("No file path for photo {}", photo.id)
            return None
        return await asyncio.to_thread(self.load_sync, photo.file_path, target_size)

    def load_sync(self, path: str, target_size: Size) -> QImage | None:
        """Blocking decode; Qt first, then Pillow."""
        if not Path(path).exists():
            logger.debug("Image file missing: {}", path)
            return None
        if Path(path).suffix.lower() not in HEIF_SUFFIXES:
            img = self._load_via_qt(path, target_size)
            if img is not None:
                return img
        elif not self._pillow_heif_available:
            logger.debug("HEIF support not installed, trying Pillow anyway: {}", path)
        return self._load_via_pillow(path, target_size)

    def _load_via_qt(self, path: str, target_size: Size) -> QImage | None:
        reader = QImageReader(path)
        reader.setAutoTransform(True)
        orig = reader.size()
        if orig.isValid():
            nw, nh = _fit_within(orig.width(), orig.height(), target_size)
            reader.setScaledSize(QSize(nw, nh))
        img = reader.read()
        if img.isNull():
            logger.debug("QImageReader failed for {}: {}", path, reader.errorString())
            return None
        if not orig.isValid() and target_size.width > 0 and target_size.height > 0:
            img = img.scaled(
                target_size.width,
                target_size.height,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        return img

    def _load_via_pillow(self, path: str, target_size: Size) -> QImage | None:
        try:
            with Image.open(path) as im:
                im = ImageOps.exif_transpose(im)
                if target_size.width > 0 and target_size.height > 0:
                    im.thumbnail((target_size.width, target_size.height), Image.Resampling.LANCZOS)
                return pil_to_qimage(im)
        except (OSError, ValueError) as ex:
            logger.debug("Pillow load failed for {}: {}", path, ex)
            return None


def pil_to_qimage(pil_img: Any) -> QImage | None:
    """Convert a Pillow image to `QImage`, detached from the source buffer."""
    if pil_img.mode not in ("RGBA", "RGB"):
        pil_img = pil_img.convert("RGBA")
    if pil_img.mode == "RGB":
        data = pil_img.tobytes("raw", "RGB")
        qimg = QImage(
            data, pil_img.width, pil_img.height, pil_img.width * 3, QImage.Format.Format_RGB888
        )
    else:
        data = pil_img.tobytes("raw", "RGBA")
        qimg = QImage(
            data, pil_img.width, pil_img.height, pil_img.width * 4, QImage.Format.Format_RGBA8888
        )
    if qimg.isNull():
        return None
    return qimg.copy()
