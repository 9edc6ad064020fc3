# gallery/services/pipeline.py
# Upload-and-publish and delete pipelines.
#
# Upload: validate -> stage -> push asset -> drop staged file -> save record -> broadcast
# Delete: check id -> find record -> delete asset (best effort) -> delete record -> broadcast
#
# Nothing wraps these in a transaction. If the record save fails after the asset
# push, the remote asset is left behind (no compensating delete).

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile
from pymongo.errors import DuplicateKeyError

from gallery.core.context import GalleryContext
from gallery.core.errors import (
    AssetStoreError,
    BadRequest,
    GalleryError,
    PersistenceError,
    PhotoNotFound,
    StageError,
)
from gallery.db.models.photo import DEFAULT_CAPTION, DEFAULT_UPLOADER, PhotoDoc, PhotoRecord
from gallery.db.repository import is_valid_photo_id
from gallery.models.schemas import DeletedPhoto, RegisterPhotoIn, UploadRequest
from gallery.services.asset_store import StoredAsset
from gallery.services.saga import Step, run_steps
from gallery.services.validation import validate_upload

logger = logging.getLogger(__name__)


@dataclass
class UploadState:
    request: UploadRequest
    upload: UploadFile
    staged_path: Optional[Path] = None
    asset: Optional[StoredAsset] = None
    record: Optional[PhotoRecord] = None


@dataclass
class DeleteState:
    photo_id: str
    record: Optional[PhotoRecord] = None
    asset_deleted: bool = False


def _upload_steps(ctx: GalleryContext) -> List[Step]:
    settings = ctx.settings

    async def stage(state: UploadState) -> None:
        # path is set before the write so a half-written file still gets cleaned up
        state.staged_path = ctx.stage.new_path(state.request.extension)
        try:
            await ctx.stage.stage(state.upload, state.staged_path)
        except Exception as e:
            raise StageError(detail=str(e)) from e

    async def push(state: UploadState) -> None:
        try:
            state.asset = await ctx.assets.upload(
                state.staged_path,
                folder=settings.ASSET_FOLDER,
                content_type=state.request.content_type,
                timeout=settings.ASSET_UPLOAD_TIMEOUT,
            )
        except AssetStoreError:
            raise
        except Exception as e:
            raise AssetStoreError(detail=str(e)) from e

    async def discard(state: UploadState) -> None:
        if not ctx.stage.discard(state.staged_path):
            raise OSError(f"staged file left behind: {state.staged_path}")

    async def persist(state: UploadState) -> None:
        doc = PhotoDoc(
            asset_url=state.asset.url,
            asset_id=state.asset.asset_id,
            caption=state.request.caption,
            uploader=state.request.uploader,
        )
        try:
            state.record = await ctx.photos.create(doc)
        except Exception as e:
            logger.error(f"record save failed, asset {state.asset.asset_id} is orphaned: {e}")
            raise PersistenceError(detail=str(e)) from e

    async def broadcast(state: UploadState) -> None:
        await ctx.broadcaster.publish_gallery(ctx.photos)

    return [
        Step("stage", stage),
        Step("push_asset", push),
        Step("discard_stage", discard, fatal=False, always=True),
        Step("persist_record", persist),
        Step("broadcast", broadcast, fatal=False),
    ]


async def run_upload(
    ctx: GalleryContext,
    upload: Optional[UploadFile],
    caption: Optional[str] = None,
    uploader: Optional[str] = None,
) -> PhotoRecord:
    request = validate_upload(upload, caption, uploader, ctx.settings.MAX_UPLOAD_BYTES)
    state = UploadState(request=request, upload=upload)
    await run_steps(_upload_steps(ctx), state, pipeline="upload")
    logger.info(f"photo uploaded: {state.record.id} ({request.filename}, {request.size} bytes)")
    return state.record


async def run_register(ctx: GalleryContext, payload: RegisterPhotoIn) -> PhotoRecord:
    """Save a record for an asset that is already in the asset store."""
    asset_url = (payload.assetUrl or "").strip()
    asset_id = (payload.assetId or "").strip()
    if not asset_url or not asset_id:
        raise BadRequest("Photo URL and asset id are required.")

    doc = PhotoDoc(
        asset_url=asset_url,
        asset_id=asset_id,
        caption=(payload.caption or "").strip() or DEFAULT_CAPTION,
        uploader=(payload.uploader or "").strip() or DEFAULT_UPLOADER,
    )
    state = {}

    async def persist(_):
        try:
            state["record"] = await ctx.photos.create(doc)
        except DuplicateKeyError as e:
            raise BadRequest("This asset is already registered.", detail=f"assetId: {asset_id!r}") from e
        except Exception as e:
            raise PersistenceError(detail=str(e)) from e

    async def broadcast(_):
        await ctx.broadcaster.publish_gallery(ctx.photos)

    await run_steps(
        [Step("persist_record", persist), Step("broadcast", broadcast, fatal=False)],
        state,
        pipeline="register",
    )
    return state["record"]


def _delete_steps(ctx: GalleryContext) -> List[Step]:
    async def lookup(state: DeleteState) -> None:
        try:
            state.record = await ctx.photos.find_by_id(state.photo_id)
        except Exception as e:
            raise PersistenceError(detail=str(e)) from e
        if state.record is None:
            raise PhotoNotFound()

    async def delete_asset(state: DeleteState) -> None:
        if not state.record.assetId:
            return
        await ctx.assets.delete(state.record.assetId)
        state.asset_deleted = True

    async def delete_record(state: DeleteState) -> None:
        try:
            deleted = await ctx.photos.delete_by_id(state.photo_id)
        except Exception as e:
            raise PersistenceError(detail=str(e)) from e
        if deleted is None:
            # a concurrent delete got there first
            raise PhotoNotFound()

    async def broadcast(state: DeleteState) -> None:
        await ctx.broadcaster.publish_gallery(ctx.photos)

    return [
        Step("lookup", lookup),
        Step("delete_asset", delete_asset, fatal=False),
        Step("delete_record", delete_record),
        Step("broadcast", broadcast, fatal=False),
    ]


async def run_delete(ctx: GalleryContext, photo_id: Optional[str]) -> DeletedPhoto:
    if not is_valid_photo_id(photo_id):
        raise BadRequest("A valid photo id is required.", detail=f"id: {photo_id!r}")
    state = DeleteState(photo_id=photo_id)
    await run_steps(_delete_steps(ctx), state, pipeline="delete")
    if state.record.assetId and not state.asset_deleted:
        logger.warning(f"photo {photo_id} removed but asset {state.record.assetId} may remain in the asset store")
    logger.info(f"photo deleted: {photo_id}")
    return DeletedPhoto(id=state.record.id, assetId=state.record.assetId, caption=state.record.caption)


async def get_photo(ctx: GalleryContext, photo_id: Optional[str]) -> PhotoRecord:
    if not is_valid_photo_id(photo_id):
        raise BadRequest("A valid photo id is required.", detail=f"id: {photo_id!r}")
    try:
        record = await ctx.photos.find_by_id(photo_id)
    except Exception as e:
        raise PersistenceError("Server Error: Photo could not be loaded.", detail=str(e)) from e
    if record is None:
        raise PhotoNotFound()
    return record


async def list_photos(ctx: GalleryContext) -> List[PhotoRecord]:
    try:
        return await ctx.photos.list_newest_first()
    except GalleryError:
        raise
    except Exception as e:
        raise PersistenceError("Server Error: Photos could not be loaded.", detail=str(e)) from e
