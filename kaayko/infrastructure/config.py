"""Application configuration.

Loads settings from environment variables (prefixed ``KAAYKO_``) with
sensible development defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Remote store
    store_backend: Literal["firestore", "memory"] = "memory"
    realtime_updates: bool = True
    products_collection: str = "kaaykoproducts"
    seed_file: str | None = None

    # Firebase
    firebase_credentials_path: str | None = None
    firebase_project_id: str | None = None
    storage_bucket: str = "kaaykostore.appspot.com"
    storage_api_url: str = "https://firebasestorage.googleapis.com/v0"
    image_namespace: str = "kaaykoStoreTShirtImages"
    storage_timeout_seconds: float = 10.0
    image_fetch_concurrency: int = Field(default=8, ge=1)

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="KAAYKO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
