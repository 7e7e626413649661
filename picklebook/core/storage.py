"""Key/value storage adapters.

Both the mock booking engine and the cache depend only on StorageAdapter.
They don't know whether values land in a dict, a SQL table or Redis.

Backend I/O failures are logged and swallowed: reads fall back to None and
writes become no-ops, so a storage hiccup degrades the app instead of
breaking it.
"""

import logging
from abc import ABC, abstractmethod

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from picklebook.core.config import Settings
from picklebook.core.database import build_engine, build_session_factory
from picklebook.models.key_value import KeyValue

logger = logging.getLogger(__name__)


class StorageAdapter(ABC):
    """Port: asynchronous string key/value persistence."""

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if absent or unreadable."""
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear_all(self) -> None:
        """Remove every key owned by this store."""
        ...

    async def close(self) -> None:
        """Release connections. No-op for backends that hold none."""
        return None


class InMemoryStorage(StorageAdapter):
    """Dict-backed store for tests and throwaway dev sessions."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear_all(self) -> None:
        self._data.clear()


class SqlStorage(StorageAdapter):
    """One row per key in `key_value_store`. The table is created on first use."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._sessions = build_session_factory(engine)
        self._schema_ready = False

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._engine.begin() as conn:
            await conn.run_sync(KeyValue.metadata.create_all, tables=[KeyValue.__table__])
        self._schema_ready = True

    async def get_item(self, key: str) -> str | None:
        try:
            await self._ensure_schema()
            async with self._sessions() as session:
                row = await session.get(KeyValue, key)
                return row.value if row else None
        except SQLAlchemyError:
            logger.exception("Storage: error getting item %s", key)
            return None

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self._ensure_schema()
            async with self._sessions.begin() as session:
                await session.merge(KeyValue(key=key, value=value))
        except SQLAlchemyError:
            logger.exception("Storage: error setting item %s", key)

    async def remove_item(self, key: str) -> None:
        try:
            await self._ensure_schema()
            async with self._sessions.begin() as session:
                await session.execute(delete(KeyValue).where(KeyValue.key == key))
        except SQLAlchemyError:
            logger.exception("Storage: error removing item %s", key)

    async def clear_all(self) -> None:
        try:
            await self._ensure_schema()
            async with self._sessions.begin() as session:
                await session.execute(delete(KeyValue))
        except SQLAlchemyError:
            logger.exception("Storage: error clearing storage")

    async def close(self) -> None:
        await self._engine.dispose()


class RedisStorage(StorageAdapter):
    """Keys live under a namespace prefix so clear_all leaves other apps' keys alone."""

    def __init__(self, client: aioredis.Redis, namespace: str = "picklebook:"):
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "picklebook:") -> "RedisStorage":
        return cls(aioredis.from_url(url, decode_responses=True), namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get_item(self, key: str) -> str | None:
        try:
            return await self._client.get(self._key(key))
        except RedisError:
            logger.exception("Storage: error getting item %s", key)
            return None

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self._client.set(self._key(key), value)
        except RedisError:
            logger.exception("Storage: error setting item %s", key)

    async def remove_item(self, key: str) -> None:
        try:
            await self._client.delete(self._key(key))
        except RedisError:
            logger.exception("Storage: error removing item %s", key)

    async def clear_all(self) -> None:
        try:
            keys = [k async for k in self._client.scan_iter(match=f"{self._namespace}*")]
            if keys:
                await self._client.delete(*keys)
        except RedisError:
            logger.exception("Storage: error clearing storage")

    async def close(self) -> None:
        await self._client.aclose()


def create_storage(settings: Settings) -> StorageAdapter:
    """Build the storage backend named by settings.storage_backend."""
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sql":
        return SqlStorage(build_engine(settings.database_url, echo=settings.database_echo))
    if backend == "redis":
        return RedisStorage.from_url(settings.redis_url, namespace=settings.redis_namespace)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")
