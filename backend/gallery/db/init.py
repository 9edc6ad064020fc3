# gallery/db/init.py
# Mongo connection helpers (motor). The client lives on GalleryContext, not in module globals.

from __future__ import annotations
import asyncio
import logging
from typing import Tuple

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


async def init_db(uri: str, name: str) -> Tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    client = AsyncIOMotorClient(uri)
    db = client[name]
    try:
        # connection check (raises if the server is not ready)
        await db.command("ping")
    except Exception:
        client.close()
        raise
    return client, db


async def init_db_with_retries(
    uri: str, name: str, retries: int = 20, delay: float = 1.0
) -> Tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    last_error: Exception | None = None
    for i in range(max(retries, 1)):
        try:
            pair = await init_db(uri, name)
            logger.info("db ready")
            return pair
        except Exception as e:
            last_error = e
            logger.warning(f"db init retry {i + 1}/{retries}: {e}")
            await asyncio.sleep(delay)
    raise RuntimeError(f"MongoDB is not reachable after {retries} attempts: {last_error}")


def close_db(client: AsyncIOMotorClient | None) -> None:
    if client is not None:
        client.close()
