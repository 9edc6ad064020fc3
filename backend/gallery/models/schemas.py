# gallery/models/schemas.py
# Request/response shapes per endpoint

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, field_validator

from gallery.db.models.photo import DEFAULT_CAPTION, DEFAULT_UPLOADER, PhotoRecord


def _or_default(value: Optional[str], default: str) -> str:
    value = (value or "").strip()
    return value or default


class UploadRequest(BaseModel):
    # validated upload input (file already checked against the allow-list)
    filename: str
    extension: str
    content_type: str
    size: int
    caption: str = DEFAULT_CAPTION
    uploader: str = DEFAULT_UPLOADER

    @field_validator("caption", mode="before")
    @classmethod
    def _v_caption(cls, v):
        return _or_default(v, DEFAULT_CAPTION)

    @field_validator("uploader", mode="before")
    @classmethod
    def _v_uploader(cls, v):
        return _or_default(v, DEFAULT_UPLOADER)


class RegisterPhotoIn(BaseModel):
    # POST /api/gallery: record an asset that is already hosted
    assetUrl: Optional[str] = None
    assetId: Optional[str] = None
    caption: Optional[str] = None
    uploader: Optional[str] = None


class DeletedPhoto(BaseModel):
    id: str
    assetId: Optional[str] = None
    caption: Optional[str] = None


class PhotoResponse(BaseModel):
    success: bool = True
    message: str
    photo: PhotoRecord


class PhotoListResponse(BaseModel):
    success: bool = True
    message: str
    photos: List[PhotoRecord]
    total: int


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    photo: DeletedPhoto
