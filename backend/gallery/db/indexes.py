# Collection indexes
# Called once from startup via ensure_indexes(db, collection_name).

from motor.motor_asyncio import AsyncIOMotorDatabase


async def ensure_indexes(db: AsyncIOMotorDatabase, collection: str = "gallery_photos") -> None:
    col = db[collection]
    # newest-first listing
    await col.create_index([("created_at", -1)])
    await col.create_index("asset_id", unique=True)
