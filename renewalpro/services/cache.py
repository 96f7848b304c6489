"""Record caches keyed by id, with optimistic patches that roll back on failure.

A ``RecordCache`` is the request's working copy of one collection.  Mutations
patch the cached record first and write to the store inside
``optimistic()``; if the write raises, the previous record is restored so the
cache never diverges from the store.

``CacheRegistry`` shares those collections between workers through Redis: one
JSON snapshot per (scope, resource), written with ``SETEX`` so Redis expires it
after ``ttl_seconds``.  Redis being unreachable degrades to a cache miss.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import replace, is_dataclass
from typing import Any, AsyncIterator, Callable, Generic, Hashable, Iterable, Optional, TypeVar

import redis.asyncio as redis
from pydantic import BaseModel, TypeAdapter
from pydantic_core import to_json
from redis.exceptions import RedisError

from renewalpro.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def _with_changes(record: Any, changes: dict[str, Any]) -> Any:
    if isinstance(record, dict):
        return {**record, **changes}
    if hasattr(record, "model_copy"):
        return record.model_copy(update=changes)
    if is_dataclass(record):
        return replace(record, **changes)
    raise TypeError(f"cannot patch record of type {type(record).__name__}")


class RecordCache(Generic[T]):
    """Insertion-ordered records keyed by id."""

    def __init__(self, key: Callable[[T], Hashable] | None = None):
        self._key = key or (lambda r: r["id"] if isinstance(r, dict) else r.id)
        self._records: dict[Hashable, T] = {}

    def load(self, records: Iterable[T]) -> None:
        """Replace the whole cache with a fresh fetch."""
        self._records = {self._key(r): r for r in records}

    def values(self) -> list[T]:
        return list(self._records.values())

    def get(self, record_id: Hashable) -> T | None:
        return self._records.get(record_id)

    def upsert(self, record: T) -> None:
        self._records[self._key(record)] = record

    def remove(self, record_id: Hashable) -> T | None:
        return self._records.pop(record_id, None)

    def patch(self, record_id: Hashable, **changes: Any) -> T:
        current = self._records.get(record_id)
        if current is None:
            raise KeyError(record_id)
        patched = _with_changes(current, changes)
        self._records[record_id] = patched
        return patched

    @asynccontextmanager
    async def optimistic(self, record_id: Hashable, **changes: Any) -> AsyncIterator[T | None]:
        """Apply ``changes`` now; restore the previous record if the body raises.

        A record that is not cached is left alone (the body still runs).
        """
        previous = self._records.get(record_id)
        patched = self.patch(record_id, **changes) if previous is not None else None
        try:
            yield patched
        except BaseException:
            if previous is not None:
                logger.warning("Rolling back optimistic patch on %r", record_id)
                self._records[record_id] = previous
            raise

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records


class CacheRegistry:
    """Redis-backed snapshots of cached collections, shared by every worker."""

    PREFIX = "renewalpro:cache"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        client: Optional[redis.Redis] = None,
    ):
        self.redis_url = redis_url or settings.redis_url
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._client = client

    async def get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def key(self, scope: str, resource: str) -> str:
        return f"{self.PREFIX}:{scope}:{resource}"

    async def fetch(self, scope: str, resource: str, model: type[M]) -> RecordCache[M] | None:
        """A working copy of the shared snapshot, or ``None`` on a miss."""
        key = self.key(scope, resource)
        try:
            client = await self.get_client()
            raw = await client.get(key)
        except RedisError as exc:
            logger.warning("Cache get failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        cache: RecordCache[M] = RecordCache()
        cache.load(TypeAdapter(list[model]).validate_json(raw))
        return cache

    async def store(self, scope: str, resource: str, cache: RecordCache) -> bool:
        """Publish ``cache`` as the shared snapshot; a zero TTL stores nothing."""
        if self.ttl_seconds <= 0:
            return False
        key = self.key(scope, resource)
        try:
            client = await self.get_client()
            await client.setex(key, self.ttl_seconds, to_json(cache.values()))
            return True
        except RedisError as exc:
            logger.warning("Cache set failed for %s: %s", key, exc)
            return False

    async def invalidate(self, scope: str, resource: Optional[str] = None) -> int:
        pattern = self.key(scope, resource or "*")
        try:
            client = await self.get_client()
            keys = [key async for key in client.scan_iter(match=pattern)]
            return await client.delete(*keys) if keys else 0
        except RedisError as exc:
            logger.warning("Cache invalidate failed for %s: %s", pattern, exc)
            return 0

    @asynccontextmanager
    async def optimistic(
        self,
        scope: str,
        resource: str,
        cache: RecordCache,
        record_id: Hashable,
        **changes: Any,
    ) -> AsyncIterator[Any]:
        """Patch ``cache`` and publish it before the body writes to the store.

        On failure the working copy is rolled back and the shared snapshot is
        dropped, so the next reader reloads from the store.
        """
        try:
            async with cache.optimistic(record_id, **changes) as patched:
                await self.store(scope, resource, cache)
                yield patched
        except BaseException:
            await self.invalidate(scope, resource)
            raise
