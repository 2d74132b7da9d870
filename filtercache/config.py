"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    log_level: str = "INFO"
    enable_structured_logging: bool = False

    # Source images
    data_root: str = "./data/images"
    allowed_image_formats: list[str] = ["jpeg", "png", "gif", "webp"]

    # Filter sets (JSON file of name -> filter set; built-ins when unset)
    filter_sets_file: str | None = None

    # Cache storage
    cache_root: str = "./data/cache"
    cache_url_prefix: str = "/media/cache"
    default_resolver: str = "default"

    # Redis resolver (registered as "redis" when a URL is configured)
    redis_url: str | None = None
    redis_socket_timeout: float = 5.0
    redis_cache_prefix: str = "imgcache"
    redis_ttl_seconds: int = 0  # 0 = never expire
    redis_url_prefix: str = "/media/redis"

    # WebP variant generation
    webp_generate: bool = False
    webp_quality: int = Field(default=100, ge=0, le=100)

    # Runtime path signing
    secret: str = "change-me"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
