# gallery/main.py
# FastAPI app setup: CORS, error envelope, routers, context lifecycle

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from gallery.api.routes_gallery import router as gallery_router
from gallery.api.routes_realtime import router as realtime_router
from gallery.core.config import Settings, settings as default_settings
from gallery.core.context import GalleryContext, build_context
from gallery.core.errors import install_error_handlers

logger = logging.getLogger("gallery")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[Settings] = None, context: Optional[GalleryContext] = None) -> FastAPI:
    settings = settings or (context.settings if context else default_settings)
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="KMV Gallery - API", version="0.1.0")
    app.state.settings = settings
    app.state.gallery = context

    origins = settings.cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app, settings)

    @app.on_event("startup")
    async def on_startup() -> None:
        # an injected context (tests) is used as-is
        if app.state.gallery is None:
            app.state.gallery = await build_context(settings)
        logger.info(f"gallery backend ready on port {settings.PORT}")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        ctx = app.state.gallery
        if ctx is not None:
            await ctx.close()
        logger.info("gallery backend stopped")

    @app.get("/")
    async def root():
        return {"success": True, "message": "Gallery backend is running", "port": settings.PORT}

    @app.get("/health")
    async def health(request: Request):
        ok = {"status": "ok", "db": "skip"}
        ctx = request.app.state.gallery
        if ctx is not None:
            try:
                await ctx.photos.ping()
                ok["db"] = "ok"
            except Exception as e:
                ok["db"] = f"error: {e}"
        return ok

    app.include_router(gallery_router)
    app.include_router(realtime_router)
    return app


app = create_app()
