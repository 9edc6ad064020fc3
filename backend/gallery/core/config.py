# Environment settings (loaded from env and .env)
from __future__ import annotations

from pydantic_settings import BaseSettings

PLACEHOLDER_ADMIN_TOKEN = "Admin_Access_Token_Placeholder"


class Settings(BaseSettings):
    APP_ENV: str = "development"  # "production" hides error detail
    PORT: int = 5001
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    # record store
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "kmv_gallery"
    PHOTOS_COLLECTION: str = "gallery_photos"
    DB_CONNECT_RETRIES: int = 20

    # asset store (S3-compatible)
    ASSET_ENDPOINT_URL: str | None = None
    ASSET_ACCOUNT_ID: str | None = None
    ASSET_ACCESS_KEY: str | None = None
    ASSET_SECRET_KEY: str | None = None
    ASSET_BUCKET: str = "kmv-gallery"
    ASSET_REGION: str = "auto"
    ASSET_PUBLIC_BASE_URL: str | None = None
    ASSET_FOLDER: str = "kmv_gallery"
    ASSET_UPLOAD_TIMEOUT: float = 60.0

    # admin gate
    ADMIN_TOKEN: str = PLACEHOLDER_ADMIN_TOKEN

    # local stage area
    STAGE_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB

    class Config:
        env_file = ".env"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
