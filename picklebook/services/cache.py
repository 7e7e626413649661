"""TTL read-through cache over the key/value store.

Entries are stored as JSON `{"data", "timestamp", "version"}` under
`namespace + key`. The timestamp is epoch millis at write time; the version
counts writes per key for the lifetime of this CacheService.

A stale entry is refreshed through the caller's fetcher. If the refresh
fails the stale data is served instead of the error. get_result() tells the
caller which of the two it got.

Concurrent reads of the same key share one in-flight fetch.

Background refresh: set() with both ttl and background_refresh starts a
task that notifies the key's subscribers every ttl seconds until the key is
invalidated.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic_core import from_json, to_json

from picklebook.core.config import settings
from picklebook.core.storage import StorageAdapter

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
RefreshListener = Callable[[str], Any]


@dataclass
class CacheConfig:
    ttl: float | None = None  # seconds; None = never stale
    background_refresh: bool = False


@dataclass
class CacheResult:
    data: Any
    fresh: bool  # False when a failed refresh fell back to stale data


class CacheService:
    def __init__(
        self,
        storage: StorageAdapter,
        namespace: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage
        self._namespace = settings.cache_namespace if namespace is None else namespace
        self._clock = clock
        self._versions: dict[str, int] = {}
        self._refresh_tasks: dict[str, asyncio.Task] = {}
        self._listeners: dict[str, list[RefreshListener]] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self._generations: dict[str, int] = {}  # bumped by invalidate()

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def version(self, key: str) -> int:
        """Number of writes to `key` seen by this instance (0 if none)."""
        return self._versions.get(key, 0)

    async def _read_entry(self, key: str) -> dict | None:
        raw = await self._storage.get_item(self._key(key))
        if not raw:
            return None
        try:
            entry = from_json(raw)
        except ValueError:
            logger.warning("Discarding unreadable cache entry for %s", key)
            return None
        if not isinstance(entry, dict) or "timestamp" not in entry:
            return None
        return entry

    async def set(self, key: str, data: Any, config: CacheConfig | None = None) -> None:
        config = config or CacheConfig()
        version = self._versions.get(key, 0) + 1
        self._versions[key] = version

        entry = {"data": data, "timestamp": self._now_ms(), "version": version}
        await self._storage.set_item(self._key(key), to_json(entry).decode())

        if config.ttl and config.background_refresh:
            self._schedule_refresh(key, config.ttl)

    async def get(self, key: str, fetcher: Fetcher | None = None, config: CacheConfig | None = None) -> Any:
        result = await self.get_result(key, fetcher, config)
        return result.data if result else None

    async def get_result(
        self, key: str, fetcher: Fetcher | None = None, config: CacheConfig | None = None
    ) -> CacheResult | None:
        """Like get(), but distinguishes fresh data from stale data served after a failed refresh.

        Returns None on a miss that no fetcher could fill.
        """
        config = config or CacheConfig()
        entry = await self._read_entry(key)

        if entry is None:
            if fetcher is None:
                return None
            # Fetch errors on a cold miss propagate: there is nothing to fall back to
            return CacheResult(await self._fetch(key, fetcher, config), fresh=True)

        age_ms = self._now_ms() - entry["timestamp"]
        if not config.ttl or age_ms <= config.ttl * 1000:
            return CacheResult(entry.get("data"), fresh=True)

        if fetcher is None:
            return None
        try:
            data = await self._fetch(key, fetcher, config)
        except Exception:
            logger.warning("Failed to refresh cache for %s, serving stale data", key, exc_info=True)
            return CacheResult(entry.get("data"), fresh=False)
        return CacheResult(data, fresh=True)

    async def _fetch(self, key: str, fetcher: Fetcher, config: CacheConfig) -> Any:
        """Run the fetcher once per key no matter how many callers are waiting."""
        task = self._inflight.get(key)
        if task is None:
            generation = self._generations.get(key, 0)
            task = asyncio.ensure_future(self._fetch_and_store(key, fetcher, config, generation))
            self._inflight[key] = task

            def _forget(done: asyncio.Task) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]

            task.add_done_callback(_forget)
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: str, fetcher: Fetcher, config: CacheConfig, generation: int) -> Any:
        data = await fetcher()
        # Invalidated while fetching: hand the data to the waiting callers but don't store it
        if self._generations.get(key, 0) == generation:
            await self.set(key, data, config)
        return data

    async def invalidate(self, key: str) -> None:
        """Drop the entry, stop its background refresh and forget its subscribers.

        A fetch already in flight for the key still answers its own callers
        but no longer writes its result back.
        """
        self._generations[key] = self._generations.get(key, 0) + 1
        self._inflight.pop(key, None)
        await self._storage.remove_item(self._key(key))
        self._cancel_refresh(key)
        self._listeners.pop(key, None)

    async def clear(self) -> None:
        for key in set(self._versions) | set(self._inflight):
            await self.invalidate(key)
        self._versions.clear()

    # ------------------------------------------------------------------
    # Background refresh
    # ------------------------------------------------------------------

    def subscribe(self, key: str, listener: RefreshListener) -> Callable[[], None]:
        """Call `listener(key)` on every background refresh tick. Returns an unsubscribe function."""
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _schedule_refresh(self, key: str, ttl: float) -> None:
        self._cancel_refresh(key)
        self._refresh_tasks[key] = asyncio.create_task(self._refresh_loop(key, ttl), name=f"cache-refresh:{key}")

    def _cancel_refresh(self, key: str) -> None:
        task = self._refresh_tasks.pop(key, None)
        if task is not None:
            task.cancel()

    async def _refresh_loop(self, key: str, ttl: float) -> None:
        while True:
            await asyncio.sleep(ttl)
            if key in self._versions:
                await self._notify(key)

    async def _notify(self, key: str) -> None:
        for listener in list(self._listeners.get(key, [])):
            try:
                result = listener(key)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Cache refresh listener failed for %s", key)

    async def close(self) -> None:
        """Cancel every background refresh task."""
        tasks = list(self._refresh_tasks.values())
        self._refresh_tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
