"""
Two-tier TTL cache with per-key load de-duplication.

A :class:`CacheTier` owns a store of :class:`CacheEntry` objects and a map of
in-flight loads. Tiers compose by making one tier's loader call the next
tier's :meth:`CacheTier.get`.
"""
import asyncio
import datetime
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, Optional, Protocol, Tuple, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import WeatherCache
from .schemas import WeatherSnapshot

logger = logging.getLogger(__name__)

V = TypeVar("V")

Clock = Callable[[], float]
Loader = Callable[[str], Awaitable[V]]


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    key: str
    value: V
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at


class CacheStore(Protocol[V]):
    async def load(self, key: str) -> Optional[CacheEntry[V]]: ...

    async def save(self, entry: CacheEntry[V]) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryStore(Generic[V]):
    """Process-local store. Entries are replaced whole, never mutated."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry[V]] = {}

    async def load(self, key: str) -> Optional[CacheEntry[V]]:
        return self._entries.get(key)

    async def save(self, entry: CacheEntry[V]) -> None:
        self._entries[entry.key] = entry

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


class SqlStore:
    """
    Durable store backed by the ``weather_cache`` table.

    One row per region; a refresh overwrites the row. A writer that loses the
    insert race to another process falls back to an UPDATE of the winner's row.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load(self, key: str) -> Optional[CacheEntry[WeatherSnapshot]]:
        async with self._session_factory() as session:
            row = (
                await session.execute(select(WeatherCache).where(WeatherCache.region == key))
            ).scalars().first()
            if row is None or row.fetched_at is None:
                return None
            try:
                value = WeatherSnapshot.model_validate(row.data)
            except ValueError:
                logger.warning("Discarding unreadable cache row for %s", key)
                return None
            return CacheEntry(key=key, value=value, stored_at=_as_utc(row.fetched_at).timestamp())

    async def save(self, entry: CacheEntry[WeatherSnapshot]) -> None:
        data = entry.value.model_dump(mode="json")
        fetched_at = datetime.datetime.fromtimestamp(entry.stored_at, tz=datetime.timezone.utc)
        async with self._session_factory() as session:
            try:
                row = (
                    await session.execute(select(WeatherCache).where(WeatherCache.region == entry.key))
                ).scalars().first()
                if row is None:
                    session.add(WeatherCache(region=entry.key, data=data, fetched_at=fetched_at))
                else:
                    row.data = data
                    row.fetched_at = fetched_at
                await session.commit()
            except IntegrityError:
                # Another writer inserted the row after our lookup
                await session.rollback()
                await session.execute(
                    update(WeatherCache)
                    .where(WeatherCache.region == entry.key)
                    .values(data=data, fetched_at=fetched_at)
                )
                await session.commit()

    async def delete(self, key: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                row = (
                    await session.execute(select(WeatherCache).where(WeatherCache.region == key))
                ).scalars().first()
                if row is not None:
                    await session.delete(row)


class CacheTier(Generic[V]):
    """
    One cache tier with a TTL and at most one in-flight load per key.

    Args:
        name: Tier name used in log lines
        ttl: Seconds an entry stays live
        loader: Coroutine function producing the value for a key on a miss
        store: Where entries live, defaults to a :class:`MemoryStore`
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        name: str,
        ttl: float,
        loader: Loader,
        store: Optional[CacheStore] = None,
        clock: Clock = time.time,
    ):
        self.name = name
        self.ttl = ttl
        self._loader = loader
        self._store = store if store is not None else MemoryStore()
        self._clock = clock
        self._inflight: Dict[str, "asyncio.Task[V]"] = {}

    def is_live(self, entry: CacheEntry) -> bool:
        return entry.age(self._clock()) < self.ttl

    async def get(self, key: str) -> Tuple[V, bool]:
        """
        Return ``(value, fresh)`` for ``key``.

        ``fresh`` is False on a hit and True when the value came from the
        loader. Concurrent misses on one key share a single load; its
        failure propagates to every waiter and nothing is stored.
        """
        task = self._inflight.get(key)
        if task is None:
            entry = await self._store.load(key)
            if entry is not None and self.is_live(entry):
                logger.debug("%s cache hit for %s (age %.0fs)", self.name, key, entry.age(self._clock()))
                return entry.value, False
            # The store lookup may have yielded; another caller could have started a load.
            task = self._inflight.get(key)
            if task is None:
                logger.debug("%s cache miss for %s", self.name, key)
                task = asyncio.ensure_future(self._load(key))
                self._inflight[key] = task
                task.add_done_callback(lambda t, k=key: self._finish(k, t))
        else:
            logger.debug("%s joining in-flight load for %s", self.name, key)

        value = await asyncio.shield(task)
        return value, True

    async def _load(self, key: str) -> V:
        value = await self._loader(key)
        await self._store.save(CacheEntry(key=key, value=value, stored_at=self._clock()))
        return value

    def _finish(self, key: str, task: "asyncio.Task[V]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("%s load for %s failed: %s", self.name, key, exc)

    async def peek(self, key: str) -> Optional[CacheEntry[V]]:
        """Return the stored entry for ``key`` regardless of its age."""
        return await self._store.load(key)

    async def invalidate(self, key: str) -> None:
        await self._store.delete(key)

    def inflight(self, key: str) -> bool:
        return key in self._inflight
