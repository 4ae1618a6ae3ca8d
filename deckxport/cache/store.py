"""
Persistent namespaced TTL cache.

Each namespace is an isolated keyspace with its own time-to-live. Entries are
checked for expiry lazily on read; expired rows stay on disk until
``sweep_expired`` or ``clear`` removes them.

INVARIANTS:
- An entry is valid iff ``now - captured_at < ttl(namespace)``
- Writing an existing key replaces the entry (new payload, new timestamp)
- Storage failures are logged and behave as a miss; they never raise
"""

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from deckxport.config import (
    BULK_METADATA_CACHE_TTL_SECONDS,
    CARD_CACHE_TTL_SECONDS,
    ORACLE_TAGS_CACHE_TTL_SECONDS,
)
from deckxport.db.database import create_cache_engine, create_session_factory, init_db
from deckxport.models.db import CacheEntryDB

logger = logging.getLogger(__name__)

# SQLite caps bound parameters per statement; stay well below it
_KEY_CHUNK_SIZE = 500


class CacheNamespace(str, Enum):
    """Independent keyspaces of the cache."""

    CARDS_BY_ID = "cards_by_id"
    CARDS_BY_NAME = "cards_by_name"
    ORACLE_TAGS = "oracle_tags"
    BULK_METADATA = "bulk_metadata"


DEFAULT_TTLS: dict[CacheNamespace, float] = {
    CacheNamespace.CARDS_BY_ID: CARD_CACHE_TTL_SECONDS,
    CacheNamespace.CARDS_BY_NAME: CARD_CACHE_TTL_SECONDS,
    CacheNamespace.ORACLE_TAGS: ORACLE_TAGS_CACHE_TTL_SECONDS,
    CacheNamespace.BULK_METADATA: BULK_METADATA_CACHE_TTL_SECONDS,
}


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached payload and the time it was captured (epoch seconds)."""

    namespace: CacheNamespace
    key: str
    payload: Any
    captured_at: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return now - self.captured_at < ttl


@dataclass(frozen=True, slots=True)
class NamespaceStats:
    """Entry counts for one namespace."""

    total: int = 0
    valid: int = 0
    expired: int = 0
    oldest: float | None = None
    newest: float | None = None


def _chunks(keys: list[str], size: int = _KEY_CHUNK_SIZE) -> Iterable[list[str]]:
    for start in range(0, len(keys), size):
        yield keys[start : start + size]


class PersistentCache:
    """
    Keyed TTL store with independent namespaces.

    One instance is owned by whoever runs imports and passed to the pipeline;
    there is no module-level cache state.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        ttls: Mapping[CacheNamespace, float] | None = None,
        clock: Callable[[], float] = time.time,
        engine: AsyncEngine | None = None,
    ) -> None:
        """
        Args:
            session_factory: Factory for sessions against the cache database
            ttls: Per-namespace overrides of DEFAULT_TTLS, in seconds
            clock: Returns current epoch seconds; injectable for tests
            engine: Engine owned by this cache, disposed by ``close()``
        """
        self._session_factory = session_factory
        self._ttls = {**DEFAULT_TTLS, **(ttls or {})}
        self._clock = clock
        self._engine = engine

    @classmethod
    def from_url(cls, url: str | None = None, **kwargs: Any) -> "PersistentCache":
        """Create a cache with its own engine (defaults to settings)."""
        engine = create_cache_engine(url)
        return cls(create_session_factory(engine), engine=engine, **kwargs)

    async def init(self) -> None:
        """Create the backing table if it does not exist yet."""
        if self._engine is None:
            return
        try:
            await init_db(self._engine)
        except SQLAlchemyError as e:
            logger.warning("Failed to initialize cache store: %s", e)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    def ttl(self, namespace: CacheNamespace) -> float:
        return self._ttls[namespace]

    def now(self) -> float:
        return self._clock()

    # --- Reads ---

    async def get(self, namespace: CacheNamespace, key: str) -> CacheEntry | None:
        """
        Get a valid entry.

        Returns None if the key is missing, expired, or the store failed.
        """
        try:
            async with self._session_factory() as session:
                row = await session.get(CacheEntryDB, (namespace.value, key))
        except SQLAlchemyError as e:
            logger.warning("Cache read failed for %s/%s: %s", namespace.value, key, e)
            return None

        if row is None:
            return None

        entry = CacheEntry(namespace, row.key, row.payload, row.captured_at)
        if not entry.is_valid(self.now(), self.ttl(namespace)):
            logger.debug("Cache entry expired: %s/%s", namespace.value, key)
            return None
        return entry

    async def get_many(self, namespace: CacheNamespace, keys: Iterable[str]) -> dict[str, Any]:
        """
        Get payloads for every key that has a valid entry.

        Missing and expired keys are absent from the result.
        """
        wanted = list(dict.fromkeys(keys))
        if not wanted:
            return {}

        now = self.now()
        ttl = self.ttl(namespace)
        found: dict[str, Any] = {}
        expired = 0

        try:
            async with self._session_factory() as session:
                for chunk in _chunks(wanted):
                    result = await session.execute(
                        select(CacheEntryDB).where(
                            CacheEntryDB.namespace == namespace.value,
                            CacheEntryDB.key.in_(chunk),
                        )
                    )
                    for row in result.scalars():
                        if now - row.captured_at < ttl:
                            found[row.key] = row.payload
                        else:
                            expired += 1
        except SQLAlchemyError as e:
            logger.warning("Cache bulk read failed for %s: %s", namespace.value, e)
            return {}

        logger.info(
            "Cache %s: found %d valid entries, %d expired, %d missing",
            namespace.value,
            len(found),
            expired,
            len(wanted) - len(found) - expired,
        )
        return found

    # --- Writes ---

    async def put(self, namespace: CacheNamespace, key: str, payload: Any) -> None:
        """Store a payload, replacing any existing entry for the key."""
        await self.put_many(namespace, {key: payload})

    async def put_many(self, namespace: CacheNamespace, items: Mapping[str, Any]) -> None:
        """Store several payloads under one capture timestamp."""
        if not items:
            return

        captured_at = self.now()
        keys = list(items)

        try:
            async with self._session_factory() as session:
                for chunk in _chunks(keys):
                    await session.execute(
                        delete(CacheEntryDB).where(
                            CacheEntryDB.namespace == namespace.value,
                            CacheEntryDB.key.in_(chunk),
                        )
                    )
                session.add_all(
                    CacheEntryDB(
                        namespace=namespace.value,
                        key=key,
                        payload=payload,
                        captured_at=captured_at,
                    )
                    for key, payload in items.items()
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning(
                "Cache write failed for %d %s entries: %s", len(items), namespace.value, e
            )
            return

        logger.debug("Cached %d %s entries", len(items), namespace.value)

    # --- Maintenance ---

    async def sweep_expired(self, namespace: CacheNamespace) -> int:
        """
        Delete expired entries in a namespace.

        Returns the number of entries removed.
        """
        cutoff = self.now() - self.ttl(namespace)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(CacheEntryDB).where(
                        CacheEntryDB.namespace == namespace.value,
                        CacheEntryDB.captured_at <= cutoff,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning("Cache sweep failed for %s: %s", namespace.value, e)
            return 0

        # rowcount is available on DELETE results; type stubs incomplete for async
        removed = int(result.rowcount)  # type: ignore[attr-defined]
        logger.info("Swept %d expired %s entries", removed, namespace.value)
        return removed

    async def sweep_all_expired(self) -> dict[CacheNamespace, int]:
        return {namespace: await self.sweep_expired(namespace) for namespace in CacheNamespace}

    async def clear(self, namespace: CacheNamespace | None = None) -> int:
        """
        Delete all entries, or all entries of one namespace.

        Returns the number of entries removed.
        """
        statement = delete(CacheEntryDB)
        if namespace is not None:
            statement = statement.where(CacheEntryDB.namespace == namespace.value)

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning("Cache clear failed: %s", e)
            return 0

        return int(result.rowcount)  # type: ignore[attr-defined]

    async def stats(self) -> dict[CacheNamespace, NamespaceStats]:
        """Entry counts per namespace, split by validity."""
        now = self.now()
        stats: dict[CacheNamespace, NamespaceStats] = {}

        try:
            async with self._session_factory() as session:
                for namespace in CacheNamespace:
                    totals = await session.execute(
                        select(
                            func.count(),
                            func.min(CacheEntryDB.captured_at),
                            func.max(CacheEntryDB.captured_at),
                        ).where(CacheEntryDB.namespace == namespace.value)
                    )
                    total, oldest, newest = totals.one()

                    valid = await session.scalar(
                        select(func.count()).where(
                            CacheEntryDB.namespace == namespace.value,
                            CacheEntryDB.captured_at > now - self.ttl(namespace),
                        )
                    )
                    stats[namespace] = NamespaceStats(
                        total=int(total),
                        valid=int(valid or 0),
                        expired=int(total) - int(valid or 0),
                        oldest=oldest,
                        newest=newest,
                    )
        except SQLAlchemyError as e:
            logger.warning("Cache stats failed: %s", e)
            return {namespace: NamespaceStats() for namespace in CacheNamespace}

        return stats
