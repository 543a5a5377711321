"""Redis cache for raw data-source payloads.

Places lookups are paid per call and the same area is often analysed
repeatedly, so raw JSON responses are cached by request arguments. Redis
being unreachable (or REDIS_URL empty) only disables caching.
"""

import functools
import hashlib
import json
import logging
from typing import Any, Callable

import redis.asyncio as redis

from rivalscan.config import settings

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis | None:
    global _redis_client
    if not settings.redis_url:
        return None
    if _redis_client is None:
        _redis_client = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_client


def cache_key(prefix: str, *args: Any, **kwargs: Any) -> str:
    """Deterministic key from the call arguments (``self`` excluded by the caller)."""
    raw = json.dumps(
        {"args": [str(a) for a in args], "kwargs": {k: str(v) for k, v in sorted(kwargs.items())}},
        sort_keys=True,
    )
    digest = hashlib.sha256(raw.encode()).hexdigest()[:16]
    return f"rivalscan:{prefix}:{digest}"


async def _read(key: str) -> Any | None:
    try:
        client = await get_redis()
        if client is None:
            return None
        payload = await client.get(key)
    except Exception as e:
        logger.warning("Redis unavailable, skipping cache read for %s: %s", key, e)
        return None
    if payload is None:
        return None
    logger.debug("Cache hit: %s", key)
    return json.loads(payload)


async def _write(key: str, value: Any, ttl_seconds: int) -> None:
    try:
        client = await get_redis()
        if client is None:
            return
        await client.setex(key, ttl_seconds, json.dumps(value, default=str))
    except Exception as e:
        logger.warning("Failed to write cache for %s: %s", key, e)


def cached_payload(prefix: str, ttl_seconds: int | None = None):
    """Cache the JSON return value of an async method.

    Args:
        prefix: Key namespace, e.g. "places:nearby".
        ttl_seconds: Defaults to ``settings.places_cache_ttl_seconds``.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            key = cache_key(prefix, *args, **kwargs)
            hit = await _read(key)
            if hit is not None:
                return hit

            result = await func(self, *args, **kwargs)
            await _write(key, result, ttl_seconds or settings.places_cache_ttl_seconds)
            return result
        return wrapper
    return decorator
