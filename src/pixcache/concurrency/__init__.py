"""Concurrency — bounded async pool for batch fetching."""

from pixcache.concurrency.pool import FetchPool

__all__ = ["FetchPool"]
