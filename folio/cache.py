"""
Tag-based cache for read-heavy content.

Each cached fetch is stored under a key together with one or more tags; write
actions invalidate a tag and every key carrying it is dropped. Supports an
in-memory implementation for tests/local runs and a Redis-backed one for
production.
"""

from __future__ import annotations

import copy
import json
import logging
import time
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any, Callable, Iterable, Optional, Protocol, TypeVar

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheTag(StrEnum):
    PORTFOLIO = "portfolio"
    SKILLS = "skills"
    ABOUT = "about"
    SETTINGS = "settings"
    BLOG = "blog"
    MESSAGES = "messages"
    ANNOUNCEMENTS = "announcements"


class CacheTTL(IntEnum):
    SHORT = 300
    MEDIUM = 1800
    LONG = 3600
    VERY_LONG = 86400


class TaggedCache(Protocol):
    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, *, ttl: int, tags: Iterable[str]) -> None:
        ...

    def invalidate_tag(self, tag: str) -> int:
        ...

    def clear(self) -> int:
        ...


@dataclass
class InMemoryTaggedCache:
    """Process-local cache keyed on a monotonic clock."""

    entries: dict = field(default_factory=dict)  # key -> (expires_at, value)
    tag_index: dict = field(default_factory=dict)  # tag -> set of keys
    clock: Callable[[], float] = time.monotonic

    def get(self, key: str) -> Optional[Any]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self.clock():
            self.entries.pop(key, None)
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, *, ttl: int, tags: Iterable[str]) -> None:
        self.entries[key] = (self.clock() + int(ttl), copy.deepcopy(value))
        for tag in tags:
            self.tag_index.setdefault(str(tag), set()).add(key)

    def invalidate_tag(self, tag: str) -> int:
        keys = self.tag_index.pop(str(tag), set())
        return sum(1 for key in keys if self.entries.pop(key, None) is not None)

    def clear(self) -> int:
        count = len(self.entries)
        self.entries.clear()
        self.tag_index.clear()
        return count


@dataclass
class RedisTaggedCache:
    """
    Redis-backed cache. Values are JSON under `<prefix>:<key>` with SETEX;
    tag membership lives in sets under `<prefix>:tag:<tag>`.
    """

    url: str
    prefix: str = "folio:cache"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self.prefix}:tag:{tag}"

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(self._key(key))
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect and miss.
            logger.warning("Redis connection lost while reading %s", key)
            self.client = redis.Redis.from_url(self.url)
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, *, ttl: int, tags: Iterable[str]) -> None:
        full_key = self._key(key)
        try:
            pipe = self.client.pipeline()
            pipe.setex(full_key, int(ttl), json.dumps(value))
            for tag in tags:
                pipe.sadd(self._tag_key(str(tag)), full_key)
            pipe.execute()
        except redis_exceptions.ConnectionError:
            logger.warning("Redis connection lost while writing %s", key)
            self.client = redis.Redis.from_url(self.url)

    def invalidate_tag(self, tag: str) -> int:
        tag_key = self._tag_key(str(tag))
        members = self.client.smembers(tag_key)
        deleted = self.client.delete(*members) if members else 0
        self.client.delete(tag_key)
        return deleted

    def clear(self) -> int:
        deleted = 0
        batch = []
        for key in self.client.scan_iter(match=f"{self.prefix}:*", count=500):
            batch.append(key)
            if len(batch) >= 500:
                deleted += self.client.delete(*batch)
                batch = []
        if batch:
            deleted += self.client.delete(*batch)
        return deleted


def cached(
    cache: Optional[TaggedCache],
    key: str,
    *,
    tags: Iterable[str],
    ttl: int,
    loader: Callable[[], T],
) -> T:
    """Returns the cached value for `key`, loading and storing it on a miss."""
    if cache is None:
        return loader()
    value = cache.get(key)
    if value is not None:
        return value
    value = loader()
    cache.set(key, value, ttl=ttl, tags=list(tags))
    return value


def _revalidate(cache: Optional[TaggedCache], tag: CacheTag) -> int:
    if cache is None:
        return 0
    try:
        removed = cache.invalidate_tag(tag)
    except redis_exceptions.RedisError:
        logger.exception("Failed to invalidate cache tag %s", tag)
        return 0
    logger.debug("Invalidated %d cache entries for tag %s", removed, tag)
    return removed


def revalidate_portfolio(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.PORTFOLIO)


def revalidate_skills(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.SKILLS)


def revalidate_about(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.ABOUT)


def revalidate_settings(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.SETTINGS)


def revalidate_blog(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.BLOG)


def revalidate_messages(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.MESSAGES)


def revalidate_announcements(cache: Optional[TaggedCache]) -> int:
    return _revalidate(cache, CacheTag.ANNOUNCEMENTS)


def revalidate_all(cache: Optional[TaggedCache]) -> int:
    return sum(_revalidate(cache, tag) for tag in CacheTag)
