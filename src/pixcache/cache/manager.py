"""Cache coordinator — orchestrates memory, disk and network tiers."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from PIL import Image

from pixcache.cache.disk import DiskStore
from pixcache.cache.keys import canonical_key
from pixcache.cache.memory import MemoryCache
from pixcache.cache.stats import CacheStats
from pixcache.errors.exceptions import DecodeError, NetworkError
from pixcache.types import (
    ErrorCallback,
    FetchPolicy,
    FetchResult,
    ImageSource,
    ResultCallback,
)
from pixcache.utils.image import decode_image

if TYPE_CHECKING:
    from pixcache.network.client import AsyncImageFetcher

logger = logging.getLogger(__name__)

_FETCH_FAILURES = (NetworkError, DecodeError)


class CacheCoordinator:
    """Two-tier image cache: L1 memory → L2 disk → network.

    The callback operations must be called from inside a running asyncio
    event loop. Cache hits are delivered synchronously before the call
    returns; network results are delivered later on that same loop.

    A failed network fetch or undecodable response delivers nothing to
    ``on_result``. Pass ``on_error`` to be told about it instead.
    """

    def __init__(
        self,
        fetcher: AsyncImageFetcher,
        disk_store: DiskStore | None = None,
        memory: MemoryCache | None = None,
        coalesce_requests: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._disk = disk_store or DiskStore()
        self._memory = memory if memory is not None else MemoryCache()
        self._coalesce = coalesce_requests
        self._pending: dict[str, asyncio.Future[FetchResult]] = {}
        self._tasks: set[asyncio.Task[FetchResult | None]] = set()
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()

    @property
    def memory(self) -> MemoryCache:
        return self._memory

    @property
    def disk_store(self) -> DiskStore:
        return self._disk

    @property
    def coalesce_requests(self) -> bool:
        return self._coalesce

    # ── Callback API ──

    def fetch_cache_first(
        self,
        identifier: object,
        on_result: ResultCallback,
        on_error: ErrorCallback | None = None,
    ) -> asyncio.Task[FetchResult | None] | None:
        """Deliver from the first tier that has the image.

        Returns the scheduled network task on a full miss, otherwise None.
        """
        key = canonical_key(identifier)
        cached = self._lookup_cached(key)
        if cached is not None:
            on_result(cached.image)
            return None
        return self._spawn(key, on_result, on_error)

    def fetch_cache_then_refresh(
        self,
        identifier: object,
        on_result: ResultCallback,
        on_error: ErrorCallback | None = None,
    ) -> asyncio.Task[FetchResult | None]:
        """Deliver any cached image now, then always refetch and deliver again."""
        key = canonical_key(identifier)
        cached = self._lookup_cached(key)
        if cached is not None:
            on_result(cached.image)
        return self._spawn(key, on_result, on_error)

    # ── Awaitable API ──

    async def get(self, identifier: object) -> Image.Image | None:
        """Cache-first lookup. Returns None if the network leg fails."""
        key = canonical_key(identifier)
        cached = self._lookup_cached(key)
        if cached is not None:
            return cached.image
        try:
            result = await self._load_from_network(key)
        except _FETCH_FAILURES as e:
            logger.warning("Fetch failed for %s: %s", key, e)
            return None
        return result.image

    async def stream(
        self,
        identifier: object,
        policy: FetchPolicy = FetchPolicy.CACHE_THEN_REFRESH,
    ) -> AsyncIterator[FetchResult]:
        """Yield results in delivery order: cached first, then network.

        CACHE_FIRST yields at most once; CACHE_THEN_REFRESH up to twice.
        """
        key = canonical_key(identifier)
        cached = self._lookup_cached(key)
        if cached is not None:
            yield cached
            if policy == FetchPolicy.CACHE_FIRST:
                return

        try:
            result = await self._load_from_network(key)
        except _FETCH_FAILURES as e:
            logger.warning("Fetch failed for %s: %s", key, e)
            return
        yield result

    # ── Management ──

    def clear_memory(self) -> None:
        self._memory.clear()

    def clear_disk(self) -> int:
        return self._disk.clear()

    def clear_all(self) -> None:
        """Clear both tiers and reset counters."""
        self.clear_memory()
        self.clear_disk()
        with self._stats_lock:
            self._stats = CacheStats()

    def stats(self) -> CacheStats:
        with self._stats_lock:
            counters = self._stats.model_copy()
        counters.memory_entries = len(self._memory)
        counters.disk_entries = self._disk.entry_count
        counters.disk_size_mb = self._disk.size_mb
        return counters

    async def join(self) -> None:
        """Wait until every scheduled network fetch has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.join()
        await self._fetcher.close()

    async def __aenter__(self) -> CacheCoordinator:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── Internals ──

    def _lookup_cached(self, key: str) -> FetchResult | None:
        """Memory first, then disk (with promotion)."""
        image = self._memory.get(key)
        if image is not None:
            self._count("memory_hits")
            return FetchResult(identifier=key, image=image, source=ImageSource.MEMORY)

        image = self._disk.load(key)
        if image is not None:
            self._memory.set(key, image)
            self._count("disk_hits")
            return FetchResult(identifier=key, image=image, source=ImageSource.DISK)

        self._count("misses")
        return None

    def _spawn(
        self,
        key: str,
        on_result: ResultCallback,
        on_error: ErrorCallback | None,
    ) -> asyncio.Task[FetchResult | None]:
        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._fetch_and_deliver(key, on_result, on_error),
            name=f"pixcache-fetch:{key}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[FetchResult | None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Fetch task %s failed: %s", task.get_name(), exc, exc_info=exc)

    async def _fetch_and_deliver(
        self,
        key: str,
        on_result: ResultCallback,
        on_error: ErrorCallback | None,
    ) -> FetchResult | None:
        try:
            result = await self._load_from_network(key)
        except _FETCH_FAILURES as e:
            logger.warning("Fetch failed for %s: %s", key, e)
            if on_error is not None:
                on_error(e)
            return None
        on_result(result.image)
        return result

    async def _load_from_network(self, key: str) -> FetchResult:
        if not self._coalesce:
            return await self._download(key)

        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._download(key))
            self._pending[key] = pending
            pending.add_done_callback(lambda fut: self._forget_pending(key, fut))
        else:
            logger.debug("Joining in-flight fetch for %s", key)
        # Shield so one cancelled waiter does not cancel the shared download
        return await asyncio.shield(pending)

    def _forget_pending(self, key: str, fut: asyncio.Future[FetchResult]) -> None:
        if self._pending.get(key) is fut:
            del self._pending[key]
        # Mark the exception retrieved; every waiter re-raises it via shield
        if not fut.cancelled():
            fut.exception()

    async def _download(self, key: str) -> FetchResult:
        self._count("network_fetches")
        try:
            data = await self._fetcher.fetch(key)
        except NetworkError:
            self._count("network_failures")
            raise

        try:
            image = await asyncio.to_thread(decode_image, data)
        except DecodeError:
            self._count("decode_failures")
            raise

        self._memory.set(key, image)
        await asyncio.to_thread(self._disk.save, image, key)
        logger.debug("Cached %s from network", key)
        return FetchResult(identifier=key, image=image, source=ImageSource.NETWORK)

    def _count(self, field: str) -> None:
        with self._stats_lock:
            setattr(self._stats, field, getattr(self._stats, field) + 1)
