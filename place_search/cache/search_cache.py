"""Read-through cache for category search results.

Entries are keyed by category plus a truncated location grid and hold
bookmark-agnostic `CachedPlace` lists. An empty list is a cached value in its
own right; `get` returns None only on a miss.

A cache outage never changes a search result: read errors count as a miss and
write errors are dropped, both logged.
"""

import json
import logging
import time
import redis.asyncio as redis
from redis.exceptions import RedisError
from typing import Optional
from place_search.core.config import settings
from place_search.models import CachedPlace

logger = logging.getLogger(__name__)


def env_prefix() -> str:
    return f"{settings.CACHE_KEY_PREFIX}:{settings.APP_ENV}:"


def category_search_key(category: str, lat: float, lng: float) -> str:
    # int() truncates toward zero: a ~1km grid at the default scale
    lat_grid = int(lat * settings.CACHE_GRID_SCALE)
    lng_grid = int(lng * settings.CACHE_GRID_SCALE)
    return f"{env_prefix()}place:region:{category}:{lat_grid}:{lng_grid}"


def category_search_pattern(category: str) -> str:
    return f"{env_prefix()}place:region:{category}:*"


def categories_key() -> str:
    return f"{env_prefix()}place:categories:all"


def _dump_places(entries: list[CachedPlace]) -> str:
    return json.dumps([entry.model_dump() for entry in entries], ensure_ascii=False)


def _load_places(raw) -> list[CachedPlace]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return [CachedPlace.model_validate(item) for item in json.loads(raw)]


class SearchResultCache:
    """Interface of the category search cache."""

    async def get(self, category: str, lat: float, lng: float) -> Optional[list[CachedPlace]]:
        raise NotImplementedError

    async def put(self, category: str, lat: float, lng: float, entries: list[CachedPlace]) -> None:
        raise NotImplementedError

    async def invalidate_category(self, category: str) -> None:
        raise NotImplementedError

    async def get_categories(self) -> Optional[list[str]]:
        raise NotImplementedError

    async def put_categories(self, categories: list[str]) -> None:
        raise NotImplementedError


class RedisSearchCache(SearchResultCache):
    def __init__(
        self,
        client: redis.Redis = None,
        search_ttl: int = None,
        categories_ttl: int = None,
    ):
        self.redis = client or redis.from_url(settings.REDIS_URL)
        self.search_ttl = (
            search_ttl if search_ttl is not None else settings.CATEGORY_SEARCH_TTL_SECONDS
        )
        self.categories_ttl = (
            categories_ttl if categories_ttl is not None else settings.CATEGORIES_TTL_SECONDS
        )

    async def get(self, category, lat, lng):
        key = category_search_key(category, lat, lng)
        try:
            raw = await self.redis.get(key)
            if raw is None:
                logger.debug(f"Category search cache miss: {key}")
                return None
            entries = _load_places(raw)
        except (RedisError, ValueError) as e:
            logger.warning(f"Category search cache read failed: key={key} error={e}")
            return None
        logger.debug(f"Category search cache hit: {key} count={len(entries)}")
        return entries

    async def put(self, category, lat, lng, entries):
        key = category_search_key(category, lat, lng)
        try:
            await self.redis.set(key, _dump_places(entries), ex=self.search_ttl)
        except RedisError as e:
            logger.warning(f"Category search cache write failed: key={key} error={e}")
            return
        logger.debug(f"Category search cached: {key} count={len(entries)}")

    async def invalidate_category(self, category):
        pattern = category_search_pattern(category)
        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern)]
            if keys:
                await self.redis.delete(*keys)
        except RedisError as e:
            logger.warning(f"Category search cache invalidation failed: {category} error={e}")
            return
        logger.debug(f"Invalidated {len(keys)} cached searches for category={category}")

    async def get_categories(self):
        try:
            raw = await self.redis.get(categories_key())
            if raw is None:
                return None
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return json.loads(raw)
        except (RedisError, ValueError) as e:
            logger.warning(f"Categories cache read failed: {e}")
            return None

    async def put_categories(self, categories):
        try:
            await self.redis.set(
                categories_key(),
                json.dumps(categories, ensure_ascii=False),
                ex=self.categories_ttl,
            )
        except RedisError as e:
            logger.warning(f"Categories cache write failed: {e}")

    async def close(self):
        await self.redis.aclose()


class InMemorySearchCache(SearchResultCache):
    """Process-local cache with the same key shape and TTL semantics."""

    def __init__(self, search_ttl: int = None, categories_ttl: int = None, clock=time.monotonic):
        self.search_ttl = (
            search_ttl if search_ttl is not None else settings.CATEGORY_SEARCH_TTL_SECONDS
        )
        self.categories_ttl = (
            categories_ttl if categories_ttl is not None else settings.CATEGORIES_TTL_SECONDS
        )
        self._clock = clock
        self._entries: dict[str, tuple[float, object]] = {}

    def _read(self, key):
        item = self._entries.get(key)
        if item is None:
            return None
        expires_at, value = item
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def _write(self, key, value, ttl):
        self._entries[key] = (self._clock() + ttl, value)

    async def get(self, category, lat, lng):
        value = self._read(category_search_key(category, lat, lng))
        return None if value is None else list(value)

    async def put(self, category, lat, lng, entries):
        self._write(category_search_key(category, lat, lng), tuple(entries), self.search_ttl)

    async def invalidate_category(self, category):
        prefix = category_search_pattern(category)[:-1]
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    async def get_categories(self):
        value = self._read(categories_key())
        return None if value is None else list(value)

    async def put_categories(self, categories):
        self._write(categories_key(), tuple(categories), self.categories_ttl)

    async def close(self):
        self._entries.clear()


def build_search_cache() -> SearchResultCache:
    if settings.CACHE_BACKEND == "memory":
        return InMemorySearchCache()
    return RedisSearchCache()
