"""
Cache directive parsing and cache key generation for HTTP requests.
"""
import re
from typing import Callable, NamedTuple, Optional

from starlette.requests import Request

KeyGenFn = Callable[[Request], str]

MATCH_HEADER = re.compile(r"s-maxage=([0-9]+)(\s*,\s*(stale-while-revalidate=([0-9]+)))?")

# Reserved URL characters dropped from generated keys
_RESERVED_CHARS = re.compile(r"[._~:/?#\[\]@!$&'()*+,;=]")


class CacheDirectives(NamedTuple):
    """Freshness windows requested by a client, in seconds."""
    max_age: int
    stale_while_revalidate: int = 0


def parse_cache_control(value: Optional[str]) -> Optional[CacheDirectives]:
    """
    Parse "s-maxage=<int>[, stale-while-revalidate=<int>]".

    Returns None when the value is missing or carries no s-maxage.
    """
    if not value:
        return None
    matched = MATCH_HEADER.search(value)
    if not matched:
        return None
    max_age = int(matched.group(1))
    stale_while_revalidate = int(matched.group(4)) if matched.group(4) else 0
    return CacheDirectives(max_age, stale_while_revalidate)


def _path_with_query(request: Request) -> str:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return path


def default_key_generator(name: str) -> KeyGenFn:
    """Key requests as "<name>-<METHOD>-<path and query, reserved chars stripped>"."""

    def key_gen(request: Request) -> str:
        return f"{name}-{request.method}-{_RESERVED_CHARS.sub('', _path_with_query(request))}"

    return key_gen


def cache_key(key: str) -> KeyGenFn:
    """Use the same key for every request."""
    return lambda request: key


def cache_key_user(user_key_fn: Callable[[Request], str]) -> KeyGenFn:
    """Scope the default key to whatever user_key_fn extracts (per-user caching)."""
    return lambda request: default_key_generator(user_key_fn(request))(request)
