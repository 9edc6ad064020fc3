# gallery/services/asset_store.py
# Remote asset store (S3-compatible: R2 / MinIO / AWS) via boto3
# boto3 is blocking, so every call runs in a worker thread.

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from gallery.core.config import Settings
from gallery.core.errors import AssetStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredAsset:
    url: str
    asset_id: str


class S3AssetStore:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._client = None

    def _endpoint_url(self) -> Optional[str]:
        if self.settings.ASSET_ENDPOINT_URL:
            return self.settings.ASSET_ENDPOINT_URL.rstrip("/")
        if self.settings.ASSET_ACCOUNT_ID:
            return f"https://{self.settings.ASSET_ACCOUNT_ID}.r2.cloudflarestorage.com"
        return None  # plain AWS

    def _get_client(self):
        if self._client is None:
            if not self.settings.ASSET_ACCESS_KEY or not self.settings.ASSET_SECRET_KEY:
                raise AssetStoreError(detail="ASSET_ACCESS_KEY and ASSET_SECRET_KEY are required.")
            self._client = boto3.client(
                "s3",
                endpoint_url=self._endpoint_url(),
                aws_access_key_id=self.settings.ASSET_ACCESS_KEY,
                aws_secret_access_key=self.settings.ASSET_SECRET_KEY,
                region_name=self.settings.ASSET_REGION,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    def public_url(self, key: str) -> str:
        base = self.settings.ASSET_PUBLIC_BASE_URL
        if base:
            return f"{base.rstrip('/')}/{key}"
        endpoint = self._endpoint_url() or f"https://s3.{self.settings.ASSET_REGION}.amazonaws.com"
        return f"{endpoint}/{self.settings.ASSET_BUCKET}/{key}"

    def _put(self, path: Path, key: str, content_type: str) -> None:
        self._get_client().upload_file(
            str(path),
            self.settings.ASSET_BUCKET,
            key,
            ExtraArgs={"ContentType": content_type},
        )

    def _delete(self, key: str) -> None:
        self._get_client().delete_object(Bucket=self.settings.ASSET_BUCKET, Key=key)

    async def upload(self, path: Path, *, folder: str, content_type: str, timeout: float) -> StoredAsset:
        key = f"{folder.strip('/')}/{path.name}"
        try:
            # the worker thread is not interrupted on timeout; the push runs to completion
            await asyncio.wait_for(asyncio.to_thread(self._put, path, key, content_type), timeout)
        except asyncio.TimeoutError as e:
            raise AssetStoreError(detail=f"asset store upload timed out after {timeout:.0f}s") from e
        except (BotoCoreError, ClientError) as e:
            raise AssetStoreError(detail=str(e)) from e
        logger.info(f"asset stored: {key}")
        return StoredAsset(url=self.public_url(key), asset_id=key)

    async def delete(self, asset_id: str) -> None:
        try:
            await asyncio.to_thread(self._delete, asset_id)
        except (BotoCoreError, ClientError) as e:
            raise AssetStoreError(detail=str(e)) from e
