"""Bounded async pool for fetching many identifiers through the cache."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pixcache.types import FetchPolicy, FetchResult

if TYPE_CHECKING:
    from pixcache.cache.manager import CacheCoordinator

logger = logging.getLogger(__name__)


class FetchPool:
    """Runs coordinator lookups concurrently, at most ``max_concurrent`` at a time."""

    def __init__(self, coordinator: CacheCoordinator, max_concurrent: int = 8) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self._coordinator = coordinator
        self._max_concurrent = max_concurrent

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    async def fetch_all(
        self,
        identifiers: Sequence[object],
        policy: FetchPolicy = FetchPolicy.CACHE_FIRST,
    ) -> list[FetchResult | None]:
        """Fetch every identifier and return results in input order.

        With CACHE_THEN_REFRESH each slot holds the freshest result seen.
        A slot is None when nothing could be obtained for that identifier.
        """
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def worker(identifier: object) -> FetchResult | None:
            async with semaphore:
                latest: FetchResult | None = None
                async for result in self._coordinator.stream(identifier, policy):
                    latest = result
                return latest

        results = await asyncio.gather(
            *(worker(i) for i in identifiers), return_exceptions=True
        )

        final: list[FetchResult | None] = []
        for identifier, result in zip(identifiers, results, strict=True):
            if isinstance(result, Exception):
                logger.error("Fetching %s failed: %s", identifier, result)
                final.append(None)
            else:
                final.append(result)
        return final
