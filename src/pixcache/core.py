"""Top-level entry points: build_cache(), fetch_images()."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from pixcache.cache.disk import DiskStore
from pixcache.cache.manager import CacheCoordinator
from pixcache.concurrency.pool import FetchPool
from pixcache.config.settings import CacheConfig
from pixcache.network.client import AsyncImageFetcher
from pixcache.types import FetchPolicy, FetchResult

logger = logging.getLogger(__name__)


def build_cache(config: CacheConfig | None = None, **overrides: Any) -> CacheCoordinator:
    """Construct a coordinator from resolved configuration.

    Keyword overrides take precedence over every config file and
    environment variable. Ignored when ``config`` is given.
    """
    cfg = config or CacheConfig.load(**overrides)
    logger.debug("Building cache in %s (coalesce=%s)", cfg.cache_dir, cfg.coalesce_requests)
    fetcher = AsyncImageFetcher(
        timeout=cfg.timeout,
        user_agent=cfg.user_agent,
        max_connections=cfg.max_concurrent,
    )
    return CacheCoordinator(
        fetcher,
        disk_store=DiskStore(cfg.cache_dir),
        coalesce_requests=cfg.coalesce_requests,
    )


async def fetch_images_async(
    identifiers: Sequence[object],
    policy: FetchPolicy = FetchPolicy.CACHE_FIRST,
    config: CacheConfig | None = None,
    **overrides: Any,
) -> list[FetchResult | None]:
    """Fetch many images through a fresh coordinator, bounded by max_concurrent."""
    cfg = config or CacheConfig.load(**overrides)
    async with build_cache(cfg) as cache:
        pool = FetchPool(cache, max_concurrent=cfg.max_concurrent)
        return await pool.fetch_all(identifiers, policy)


def fetch_images(
    identifiers: Sequence[object],
    policy: FetchPolicy = FetchPolicy.CACHE_FIRST,
    config: CacheConfig | None = None,
    **overrides: Any,
) -> list[FetchResult | None]:
    """Synchronous wrapper around fetch_images_async()."""
    return asyncio.run(fetch_images_async(identifiers, policy, config, **overrides))
