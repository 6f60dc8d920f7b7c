from functools import lru_cache
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vidlink.constants import DEFAULT_USER_AGENT


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Web server
    webapp_host: str = Field(default="0.0.0.0", alias="WEBAPP_HOST")
    webapp_port: int = Field(default_factory=lambda: int(os.getenv("PORT", 8000)), alias="PORT")

    # Outbound HTTP, per attempt
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="USER_AGENT")
    http_timeout_sec: float = Field(default=3.0, gt=0, alias="HTTP_TIMEOUT_SEC")
    http_max_retries: int = Field(default=2, ge=0, alias="HTTP_MAX_RETRIES")
    http_backoff_base_sec: float = Field(default=0.2, ge=0, alias="HTTP_BACKOFF_BASE_SEC")
    http_backoff_factor: float = Field(default=3.0, ge=1, alias="HTTP_BACKOFF_FACTOR")
    http_max_page_bytes: int = Field(default=5 * 1024 * 1024, gt=0, alias="HTTP_MAX_PAGE_BYTES")

    # Thumbnails
    thumbnail_ceiling_sec: float = Field(default=12.0, gt=0, alias="THUMBNAIL_CEILING_SEC")
    thumbnail_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0, alias="THUMBNAIL_MAX_BYTES")
    thumbnail_dir: str = Field(default="./thumbnails", alias="THUMBNAIL_DIR")
    thumbnail_cache_ttl_sec: int = Field(default=3600, ge=0, alias="THUMBNAIL_CACHE_TTL_SEC")
    thumbnail_cache_size: int = Field(default=1024, ge=0, alias="THUMBNAIL_CACHE_SIZE")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
