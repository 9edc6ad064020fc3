# Error taxonomy + JSON error envelope
# Every error response is {"success": false, "message": ..., "error"?: ...}

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gallery.core.config import Settings

logger = logging.getLogger(__name__)


class GalleryError(Exception):
    """Base error; subclasses fix the HTTP status and the default message."""

    status_code = 500
    message = "Server Error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class AuthDenied(GalleryError):
    status_code = 401
    message = "Authorization denied. Admin access required."


class FileInvalid(GalleryError):
    status_code = 400
    message = "Invalid image file."


class BadRequest(GalleryError):
    status_code = 400
    message = "Bad request."


class PhotoNotFound(GalleryError):
    status_code = 404
    message = "Photo not found"


class StageError(GalleryError):
    status_code = 500
    message = "Server Error: Image could not be staged."


class AssetStoreError(GalleryError):
    status_code = 500
    message = "Server Error: Image upload to asset store failed."


class PersistenceError(GalleryError):
    status_code = 500
    message = "Server Error: Photo record could not be saved."


def error_body(message: str, detail: Optional[str], settings: Settings) -> dict:
    body = {"success": False, "message": message}
    if detail and not settings.is_production:
        body["error"] = detail
    return body


def install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(GalleryError)
    async def _gallery_error(request: Request, exc: GalleryError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.detail, settings),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        # routing errors (404 unknown path, 405 wrong method) and any HTTPException
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), None, settings),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request.", str(exc.errors()), settings),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.error(f"unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("Server Error", str(exc), settings),
        )
