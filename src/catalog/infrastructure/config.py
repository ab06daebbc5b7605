"""Application settings, read from ``CATALOG_*`` environment variables or a
``.env`` file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", pattern="^(development|production)$")
    log_level: str = "INFO"

    # Local catalog
    data_file: Path = Path("data") / "catalog.json"

    # Remote catalog provider (Shopify Admin API)
    shopify_store_domain: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-01"
    request_timeout: float = 30.0

    @property
    def remote_configured(self) -> bool:
        return bool(self.shopify_store_domain and self.shopify_access_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
