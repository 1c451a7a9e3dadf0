"""Configuration management using pydantic-settings."""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Stalier settings loaded from STALIER_-prefixed environment variables."""

    # Default cache key prefix for the HTTP adapter
    app_name: str = "stalier"

    # Request header carrying "s-maxage=<int>[, stale-while-revalidate=<int>]"
    header_key: str = "X-Stalier-Cache-Control"

    # Response header reporting HIT / MISS / STALE / NO_CACHE
    cache_status_header: str = "X-Cache-Status"

    # Only these methods are considered for caching
    cacheable_methods: List[str] = ["GET", "POST"]

    class Config:
        env_prefix = "STALIER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
