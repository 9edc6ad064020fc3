# gallery/db/repository.py
# Record store: the only code that touches the photos collection

from __future__ import annotations
from typing import List, Optional

from bson.errors import InvalidId
from bson.objectid import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import DESCENDING

from gallery.db.models.photo import PhotoDoc, PhotoRecord

_PLACEHOLDER_IDS = {"undefined", "null"}


def is_valid_photo_id(value: Optional[str]) -> bool:
    # frontends send "undefined"/"null" when the id was never set
    if not value or value.strip() in _PLACEHOLDER_IDS:
        return False
    return ObjectId.is_valid(value)


def _oid(photo_id: str) -> ObjectId:
    try:
        return ObjectId(photo_id)
    except (InvalidId, TypeError) as e:
        raise ValueError(f"'{photo_id}' is not a valid ObjectId") from e


class PhotoRepository:
    def __init__(self, collection: AsyncIOMotorCollection):
        self._col = collection

    async def create(self, doc: PhotoDoc) -> PhotoRecord:
        data = doc.model_dump()
        result = await self._col.insert_one(data)
        data["_id"] = result.inserted_id
        return PhotoRecord.from_mongo(data)

    async def list_newest_first(self) -> List[PhotoRecord]:
        # equal created_at values come back in whatever order the server yields
        cursor = self._col.find({}).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=None)
        return [PhotoRecord.from_mongo(d) for d in docs]

    async def find_by_id(self, photo_id: str) -> Optional[PhotoRecord]:
        doc = await self._col.find_one({"_id": _oid(photo_id)})
        return PhotoRecord.from_mongo(doc) if doc else None

    async def delete_by_id(self, photo_id: str) -> Optional[PhotoRecord]:
        doc = await self._col.find_one_and_delete({"_id": _oid(photo_id)})
        return PhotoRecord.from_mongo(doc) if doc else None

    async def ping(self) -> None:
        await self._col.database.command("ping")
