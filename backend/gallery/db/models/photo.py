# gallery/db/models/photo.py
# Photo record: Mongo document shape (snake_case) and API shape (camelCase)

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field

DEFAULT_CAPTION = "No caption"
DEFAULT_UPLOADER = "Admin"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PhotoDoc(BaseModel):
    # insert shape; _id is assigned by Mongo
    asset_url: str
    asset_id: str
    caption: str = DEFAULT_CAPTION
    uploader: str = DEFAULT_UPLOADER
    created_at: datetime = Field(default_factory=_utcnow)


class PhotoRecord(BaseModel):
    id: str
    assetUrl: str
    assetId: str
    caption: str = DEFAULT_CAPTION
    uploader: str = DEFAULT_UPLOADER
    createdAt: datetime

    @classmethod
    def from_mongo(cls, doc: Dict[str, Any]) -> "PhotoRecord":
        return cls(
            id=str(doc["_id"]),
            assetUrl=doc["asset_url"],
            assetId=doc["asset_id"],
            caption=doc.get("caption") or DEFAULT_CAPTION,
            uploader=doc.get("uploader") or DEFAULT_UPLOADER,
            createdAt=doc["created_at"],
        )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
