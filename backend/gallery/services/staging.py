# gallery/services/staging.py
# Local stage area: uploads sit here between the request and the asset store push

from __future__ import annotations
import asyncio
import logging
import os
import secrets
import shutil
import time
from pathlib import Path

from fastapi import UploadFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class StageArea:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def new_path(self, extension: str) -> Path:
        # ms timestamp + pid + random suffix; the directory is shared by concurrent uploads
        name = f"{int(time.time() * 1000)}-{os.getpid()}-{secrets.token_hex(8)}.{extension.lstrip('.').lower()}"
        return self.root / name

    async def stage(self, upload: UploadFile, path: Path) -> Path:
        self.ensure()
        await upload.seek(0)
        await asyncio.to_thread(self._copy, upload, path)
        return path

    @staticmethod
    def _copy(upload: UploadFile, path: Path) -> None:
        # "xb": never overwrite another request's file
        with open(path, "xb") as out:
            shutil.copyfileobj(upload.file, out, CHUNK_SIZE)

    def discard(self, path: Path | None) -> bool:
        """Remove a staged file. Never raises; returns True when nothing is left behind."""
        if path is None:
            return True
        try:
            path.unlink()
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"failed to remove staged file {path}: {e}")
            return False
        return True
