# gallery/services/validation.py
# Upload checks. Runs before anything is written or sent anywhere.

from __future__ import annotations
import os
from typing import Optional

from fastapi import UploadFile

from gallery.core.errors import FileInvalid
from gallery.models.schemas import UploadRequest

ALLOWED_TYPES = frozenset({"jpeg", "jpg", "png", "gif", "webp"})


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


def media_subtype(content_type: Optional[str]) -> str:
    # "image/JPEG; charset=binary" -> "jpeg"
    ct = (content_type or "").split(";", 1)[0].strip().lower()
    major, _, minor = ct.partition("/")
    return minor if major == "image" else ""


def upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    f = upload.file
    pos = f.tell()
    f.seek(0, os.SEEK_END)
    size = f.tell()
    f.seek(pos)
    return size


def validate_upload(
    upload: Optional[UploadFile],
    caption: Optional[str],
    uploader: Optional[str],
    max_bytes: int,
) -> UploadRequest:
    if upload is None or not upload.filename:
        raise FileInvalid("No image file uploaded.")

    size = upload_size(upload)
    if size <= 0:
        raise FileInvalid("Empty files cannot be uploaded.")
    if size > max_bytes:
        raise FileInvalid(f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")

    # both the name and the declared type must pass
    ext = file_extension(upload.filename)
    if ext not in ALLOWED_TYPES:
        raise FileInvalid("Only image files (jpeg, jpg, png, gif, webp) are allowed.", detail=f"extension: {ext!r}")
    subtype = media_subtype(upload.content_type)
    if subtype not in ALLOWED_TYPES:
        raise FileInvalid(
            "Only image files (jpeg, jpg, png, gif, webp) are allowed.",
            detail=f"content type: {upload.content_type!r}",
        )

    # "image/jpg" is not a registered type
    canonical = "jpeg" if subtype == "jpg" else subtype
    return UploadRequest(
        filename=upload.filename,
        extension=ext,
        content_type=f"image/{canonical}",
        size=size,
        caption=caption,
        uploader=uploader,
    )
