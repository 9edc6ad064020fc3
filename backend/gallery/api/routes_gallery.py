# gallery/api/routes_gallery.py
# Gallery REST endpoints. Reads are public; writes go through the admin gate.

from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from gallery.core.context import GalleryContext, get_context
from gallery.core.deps import AdminPrincipal, require_admin
from gallery.core.errors import BadRequest
from gallery.models.schemas import (
    DeleteResponse,
    PhotoListResponse,
    PhotoResponse,
    RegisterPhotoIn,
)
from gallery.services import pipeline

router = APIRouter(prefix="/api/gallery", tags=["gallery"])


@router.get("", response_model=PhotoListResponse)
async def list_gallery(ctx: GalleryContext = Depends(get_context)):
    """All photos, newest first."""
    photos = await pipeline.list_photos(ctx)
    return PhotoListResponse(message="Photos fetched", photos=photos, total=len(photos))


@router.post("/upload", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    image: Optional[UploadFile] = File(default=None),
    caption: Optional[str] = Form(default=None),
    uploader: Optional[str] = Form(default=None),
    admin: AdminPrincipal = Depends(require_admin),
    ctx: GalleryContext = Depends(get_context),
):
    record = await pipeline.run_upload(ctx, image, caption=caption, uploader=uploader)
    return PhotoResponse(message="Image uploaded and saved successfully", photo=record)


@router.post("", response_model=PhotoResponse, status_code=201)
async def register_photo(
    payload: RegisterPhotoIn,
    admin: AdminPrincipal = Depends(require_admin),
    ctx: GalleryContext = Depends(get_context),
):
    """Record a photo that is already hosted in the asset store."""
    record = await pipeline.run_register(ctx, payload)
    return PhotoResponse(message="Photo saved successfully", photo=record)


@router.get("/{photo_id}", response_model=PhotoResponse)
async def get_gallery_photo(photo_id: str, ctx: GalleryContext = Depends(get_context)):
    record = await pipeline.get_photo(ctx, photo_id)
    return PhotoResponse(message="Photo fetched", photo=record)


@router.delete("/{photo_id}", response_model=DeleteResponse)
async def delete_photo(
    photo_id: str,
    admin: AdminPrincipal = Depends(require_admin),
    ctx: GalleryContext = Depends(get_context),
):
    deleted = await pipeline.run_delete(ctx, photo_id)
    return DeleteResponse(message="Photo removed", photo=deleted)


@router.delete("")
@router.delete("/", include_in_schema=False)
async def delete_photo_without_id(admin: AdminPrincipal = Depends(require_admin)):
    raise BadRequest("A valid photo id is required.")
