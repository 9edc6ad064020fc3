# gallery/core/context.py
# Process-scoped state: built once on startup, torn down on shutdown, injected per request

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Request, WebSocket

from gallery.core.config import PLACEHOLDER_ADMIN_TOKEN, Settings
from gallery.db.indexes import ensure_indexes
from gallery.db.init import close_db, init_db_with_retries
from gallery.db.repository import PhotoRepository
from gallery.services.asset_store import S3AssetStore
from gallery.services.broadcaster import Broadcaster
from gallery.services.staging import StageArea

logger = logging.getLogger(__name__)


@dataclass
class GalleryContext:
    settings: Settings
    photos: PhotoRepository
    assets: Any  # S3AssetStore or anything with async upload()/delete()
    stage: StageArea
    broadcaster: Broadcaster = field(default_factory=Broadcaster)
    db_client: Optional[Any] = None

    async def close(self) -> None:
        await self.broadcaster.close()
        close_db(self.db_client)
        self.db_client = None


async def build_context(settings: Settings) -> GalleryContext:
    if settings.ADMIN_TOKEN == PLACEHOLDER_ADMIN_TOKEN:
        logger.warning("ADMIN_TOKEN is the built-in placeholder; set it before deploying")

    client, db = await init_db_with_retries(
        settings.MONGODB_URI, settings.MONGODB_DB, retries=settings.DB_CONNECT_RETRIES
    )
    try:
        await ensure_indexes(db, settings.PHOTOS_COLLECTION)
        logger.info("indexes ensured")
    except Exception as e:
        logger.error(f"ensure_indexes failed: {e}")

    stage = StageArea(settings.STAGE_DIR)
    stage.ensure()
    return GalleryContext(
        settings=settings,
        photos=PhotoRepository(db[settings.PHOTOS_COLLECTION]),
        assets=S3AssetStore(settings),
        stage=stage,
        db_client=client,
    )


def get_context(request: Request) -> GalleryContext:
    ctx = getattr(request.app.state, "gallery", None)
    if ctx is None:
        raise RuntimeError("Gallery context is not initialized yet.")
    return ctx


def get_ws_context(websocket: WebSocket) -> GalleryContext:
    ctx = getattr(websocket.app.state, "gallery", None)
    if ctx is None:
        raise RuntimeError("Gallery context is not initialized yet.")
    return ctx
