"""
Book listing cache in Redis.

Listings are stored under a generation-stamped key. Every write to the
catalog bumps the generation, so a scan that started before the write
stores its result under a key no reader will ask for again.
"""

from __future__ import annotations

import json
from typing import Optional, Sequence

import redis.asyncio as redis
import structlog
from pydantic import ValidationError

from bookshelf.config import get_settings
from bookshelf.schemas.book import BookRecord

logger = structlog.get_logger()

GENERATION_KEY = "books:generation"
LIST_KEY_PREFIX = "books:list:"

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.from_url(settings.redis_dsn, decode_responses=True)
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def list_key(generation: int) -> str:
    return f"{LIST_KEY_PREFIX}{generation}"


async def current_generation() -> Optional[int]:
    """Generation the next listing belongs to; ``None`` when the cache is off or unreachable."""
    if not get_settings().cache_enabled:
        return None
    try:
        r = await get_redis()
        value = await r.get(GENERATION_KEY)
    except redis.RedisError:
        logger.warning("cache_generation_error")
        return None
    return int(value) if value else 0


async def get_book_list(generation: Optional[int]) -> Optional[list[BookRecord]]:
    if generation is None:
        return None
    try:
        r = await get_redis()
        raw = await r.get(list_key(generation))
    except redis.RedisError:
        logger.warning("cache_get_error", generation=generation)
        return None
    if not raw:
        return None
    try:
        return [BookRecord.model_validate(item) for item in json.loads(raw)]
    except (ValueError, TypeError, ValidationError):
        logger.warning("cache_entry_invalid", generation=generation)
        return None


async def store_book_list(
    books: Sequence[BookRecord],
    generation: Optional[int],
    ttl_seconds: Optional[int] = None,
) -> None:
    if generation is None:
        return
    ttl = ttl_seconds or get_settings().books_cache_ttl_seconds
    payload = json.dumps([b.to_wire() for b in books])
    try:
        r = await get_redis()
        await r.setex(list_key(generation), ttl, payload)
    except redis.RedisError:
        logger.warning("cache_set_error", generation=generation)


async def invalidate_book_list() -> None:
    """Start a new generation and drop the listings cached so far."""
    if not get_settings().cache_enabled:
        return
    try:
        r = await get_redis()
        generation = await r.incr(GENERATION_KEY)
        async for key in r.scan_iter(match=f"{LIST_KEY_PREFIX}*"):
            if key != list_key(generation):
                await r.delete(key)
    except redis.RedisError:
        logger.warning("cache_invalidate_error")
