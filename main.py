from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
import sys

from loguru import logger

from app.viewmodels.image_tasks import ImageTaskRunner
from core import constants
from core.services.delete_queue import DeleteQueue
from core.services.image_cache import ImageCache
from core.services.review_engine import ReviewEngine
from infrastructure.authorization import FolderAuthorizationService
from infrastructure.csv_repository import CsvAssetSource
from infrastructure.delete_service import TrashAssetStore
from infrastructure.folder_source import FolderAssetSource
from infrastructure.image_service import QtImageLoader
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent


def build_engine(target: str | Path, settings: JsonSettings) -> ReviewEngine:
    """Wire a ReviewEngine for a photo folder or a CSV photo list."""
    target = Path(target)
    if target.suffix.lower() == ".csv":
        source = CsvAssetSource(target)
        auth = None
    else:
        source = FolderAssetSource(target, recursive=bool(settings.get("source.recursive", True)))
        auth = FolderAuthorizationService(target)
    return ReviewEngine(
        source=source,
        loader=QtImageLoader(),
        store=TrashAssetStore(settings.get("delete.log_dir")),
        delete_queue=DeleteQueue(),
        image_cache=ImageCache(),
        auth_service=auth,
        thumbnail_size=settings.get_size("thumbnail.size", constants.THUMBNAIL_SIZE),
        full_image_size=settings.get_size("image.full_size", constants.FULL_IMAGE_SIZE),
    )


def build_image_tasks(engine: ReviewEngine, settings: JsonSettings) -> ImageTaskRunner:
    return ImageTaskRunner(
        engine,
        look_ahead=settings.get_int("card.stack_count", constants.CARD_STACK_COUNT),
        preload_count=settings.get_int(
            "thumbnail.preload_count", constants.THUMBNAIL_PRELOAD_COUNT
        ),
    )


async def run_session(engine: ReviewEngine, tasks: ImageTaskRunner) -> int:
    """Authorize, load and warm the cache once; report what was found."""
    status = await engine.check_authorization()
    if not engine.is_authorized:
        logger.warning("Photo access not granted: {}", status.value)
        print(f"Access not granted ({status.value})")
        return 1

    previews = await tasks.prefetch_stack()
    thumbs = await tasks.prefetch_filmstrip()
    loaded = sum(1 for img in previews if img is not None)
    thumbed = sum(1 for img in thumbs if img is not None)
    logger.info(
        "Session ready: photos={} previews={}/{} thumbnails={}/{}",
        len(engine.photos),
        loaded,
        len(previews),
        thumbed,
        len(thumbs),
    )
    print(f"{len(engine.photos)} photos to review ({loaded} previews ready)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Photo review session")
    parser.add_argument("target", help="photo folder or CSV photo list")
    parser.add_argument("--settings", default=str(BASE_DIR / "settings.json"))
    args = parser.parse_args(argv)

    settings = JsonSettings(args.settings)
    init_logging(settings.get("logging.dir"), level=str(settings.get("logging.level", "INFO")))

    engine = build_engine(args.target, settings)
    tasks = build_image_tasks(engine, settings)

    return asyncio.run(run_session(engine, tasks))


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
