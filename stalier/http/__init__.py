"""
FastAPI / Starlette adapter for stale-while-revalidate caching.
"""
from .headers import (
    MATCH_HEADER,
    CacheDirectives,
    KeyGenFn,
    cache_key,
    cache_key_user,
    default_key_generator,
    parse_cache_control,
)
from .middleware import CachedResponse, StalierMiddleware, UpstreamResponseError

__all__ = [
    # Headers and keys
    "MATCH_HEADER",
    "CacheDirectives",
    "KeyGenFn",
    "cache_key",
    "cache_key_user",
    "default_key_generator",
    "parse_cache_control",
    # Middleware
    "CachedResponse",
    "StalierMiddleware",
    "UpstreamResponseError",
]
