"""Record store, asset store and broadcaster against mocked drivers."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError
from bson.objectid import ObjectId

from fakes import FakePhotoRepository, FakeSocket, utc
from gallery.core.config import Settings
from gallery.core.errors import AssetStoreError
from gallery.db.models.photo import PhotoDoc
from gallery.db.repository import PhotoRepository, is_valid_photo_id
from gallery.services.asset_store import S3AssetStore
from gallery.services.broadcaster import Broadcaster


# ---------------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------------


def _doc(oid, created_at):
    return {
        "_id": oid,
        "asset_url": "https://assets.test/k.jpg",
        "asset_id": "k.jpg",
        "caption": None,
        "uploader": "Nima",
        "created_at": created_at,
    }


def test_is_valid_photo_id():
    assert is_valid_photo_id(str(ObjectId()))
    for bad in (None, "", "undefined", "null", "xyz", "  "):
        assert not is_valid_photo_id(bad)


@pytest.mark.asyncio
async def test_repository_create():
    oid = ObjectId()
    col = MagicMock()
    col.insert_one = AsyncMock(return_value=MagicMock(inserted_id=oid))
    repo = PhotoRepository(col)

    rec = await repo.create(PhotoDoc(asset_url="https://assets.test/k.jpg", asset_id="k.jpg"))
    assert rec.id == str(oid)
    assert rec.caption == "No caption"
    inserted = col.insert_one.call_args.args[0]
    assert inserted["asset_id"] == "k.jpg"
    assert isinstance(inserted["created_at"], datetime)


@pytest.mark.asyncio
async def test_repository_list_sorts_by_created_at_desc():
    col = MagicMock()
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[_doc(ObjectId(), utc(2024, 1, 2)), _doc(ObjectId(), utc(2024, 1, 1))])
    col.find.return_value.sort.return_value = cursor
    repo = PhotoRepository(col)

    records = await repo.list_newest_first()
    col.find.return_value.sort.assert_called_once_with("created_at", -1)
    assert [r.createdAt.day for r in records] == [2, 1]
    assert records[0].caption == "No caption"


@pytest.mark.asyncio
async def test_repository_find_and_delete():
    oid = ObjectId()
    col = MagicMock()
    col.find_one = AsyncMock(return_value=_doc(oid, utc(2024, 1, 1)))
    col.find_one_and_delete = AsyncMock(return_value=None)
    repo = PhotoRepository(col)

    assert (await repo.find_by_id(str(oid))).id == str(oid)
    col.find_one.assert_awaited_once_with({"_id": oid})
    assert await repo.delete_by_id(str(oid)) is None


# ---------------------------------------------------------------------------
# Asset store
# ---------------------------------------------------------------------------


def _asset_settings(**overrides):
    values = dict(
        ASSET_ACCESS_KEY="key",
        ASSET_SECRET_KEY="secret",
        ASSET_BUCKET="kmv-gallery",
        ASSET_ENDPOINT_URL="https://objects.test/",
    )
    values.update(overrides)
    return Settings(**values)


def test_public_url():
    store = S3AssetStore(_asset_settings())
    assert store.public_url("kmv_gallery/a.jpg") == "https://objects.test/kmv-gallery/kmv_gallery/a.jpg"
    cdn = S3AssetStore(_asset_settings(ASSET_PUBLIC_BASE_URL="https://cdn.test/"))
    assert cdn.public_url("kmv_gallery/a.jpg") == "https://cdn.test/kmv_gallery/a.jpg"


@pytest.mark.asyncio
async def test_upload_returns_key_and_url(tmp_path, monkeypatch):
    store = S3AssetStore(_asset_settings())
    put = MagicMock()
    monkeypatch.setattr(store, "_put", put)
    path = tmp_path / "1700000000000-1-abcd.jpg"
    path.write_bytes(b"img")

    asset = await store.upload(path, folder="kmv_gallery", content_type="image/jpeg", timeout=5)
    assert asset.asset_id == "kmv_gallery/1700000000000-1-abcd.jpg"
    assert asset.url == "https://objects.test/kmv-gallery/kmv_gallery/1700000000000-1-abcd.jpg"
    put.assert_called_once_with(path, asset.asset_id, "image/jpeg")


@pytest.mark.asyncio
async def test_upload_timeout(tmp_path, monkeypatch):
    store = S3AssetStore(_asset_settings())
    monkeypatch.setattr(store, "_put", lambda *a: time.sleep(0.3))
    with pytest.raises(AssetStoreError, match="timed out"):
        await store.upload(tmp_path / "a.jpg", folder="f", content_type="image/jpeg", timeout=0.05)


@pytest.mark.asyncio
async def test_upload_client_error(tmp_path, monkeypatch):
    store = S3AssetStore(_asset_settings())

    def _fail(*a):
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "nope"}}, "PutObject")

    monkeypatch.setattr(store, "_put", _fail)
    with pytest.raises(AssetStoreError):
        await store.upload(tmp_path / "a.jpg", folder="f", content_type="image/jpeg", timeout=5)


@pytest.mark.asyncio
async def test_missing_credentials(tmp_path):
    store = S3AssetStore(_asset_settings(ASSET_ACCESS_KEY=None))
    with pytest.raises(AssetStoreError):
        await store.delete("f/a.jpg")


# ---------------------------------------------------------------------------
# Broadcaster
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_publish_gallery_sends_one_event_each():
    repo = FakePhotoRepository()
    old = repo.seed(utc(2024, 1, 1))
    new = repo.seed(utc(2024, 1, 2))
    b = Broadcaster()
    viewers = [FakeSocket(), FakeSocket()]
    for v in viewers:
        b.connect(v)
    b.connect(viewers[0])  # duplicate connect is ignored

    assert await b.publish_gallery(repo) == 2
    for v in viewers:
        assert len(v.messages) == 1
        assert v.messages[0]["event"] == "gallery_updated"
        assert [p["id"] for p in v.messages[0]["data"]] == [new.id, old.id]


@pytest.mark.asyncio
async def test_dead_subscriber_dropped():
    b = Broadcaster()
    alive, dead = FakeSocket(), FakeSocket(fail=True)
    b.connect(alive)
    b.connect(dead)
    assert await b.broadcast("gallery_updated", []) == 1
    assert b.subscriber_count == 1

    await b.close()
    assert alive.closed
    assert b.subscriber_count == 0


def test_photo_json_shape():
    repo = FakePhotoRepository()
    rec = repo.seed(datetime(2024, 1, 1, tzinfo=timezone.utc))
    data = rec.to_json()
    assert set(data) == {"id", "assetUrl", "assetId", "caption", "uploader", "createdAt"}
    assert data["createdAt"].startswith("2024-01-01T00:00:00")
