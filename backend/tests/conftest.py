"""Shared fixtures for the gallery test suite.

The app gets an injected GalleryContext built from in-memory fakes and a
temp-dir stage area, so tests run without MongoDB or an object store.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from httpx import ASGITransport, AsyncClient

from fakes import FakeAssetStore, FakePhotoRepository
from gallery.core.config import Settings
from gallery.core.context import GalleryContext
from gallery.main import create_app
from gallery.services.broadcaster import Broadcaster
from gallery.services.staging import StageArea


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def stage_dir(tmp_path) -> Path:
    return tmp_path / "stage"


@pytest.fixture
def settings(stage_dir) -> Settings:
    return Settings(
        APP_ENV="development",
        ADMIN_TOKEN="secret",
        STAGE_DIR=str(stage_dir),
        MAX_UPLOAD_BYTES=10 * 1024 * 1024,
        ASSET_FOLDER="kmv_gallery",
        ASSET_UPLOAD_TIMEOUT=60.0,
        CORS_ORIGINS="*",
    )


@pytest.fixture
def photos() -> FakePhotoRepository:
    return FakePhotoRepository()


@pytest.fixture
def assets() -> FakeAssetStore:
    return FakeAssetStore()


@pytest.fixture
def ctx(settings, photos, assets, stage_dir) -> GalleryContext:
    return GalleryContext(
        settings=settings,
        photos=photos,
        assets=assets,
        stage=StageArea(stage_dir),
        broadcaster=Broadcaster(),
    )


@pytest.fixture
def app(ctx):
    return create_app(context=ctx)


@pytest.fixture
async def client(app):
    """Async test client; lifespan is not run, the context is already injected."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def staged_files(stage_dir):
    def _list() -> List[Path]:
        if not stage_dir.exists():
            return []
        return list(stage_dir.iterdir())

    return _list
