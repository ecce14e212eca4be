"""pixcache — two-tier (memory + disk) image cache backed by network fetch."""

from pixcache.cache.disk import DiskStore
from pixcache.cache.manager import CacheCoordinator
from pixcache.cache.memory import MemoryCache
from pixcache.cache.stats import CacheStats
from pixcache.core import build_cache, fetch_images, fetch_images_async
from pixcache.network.client import AsyncImageFetcher
from pixcache.types import FetchPolicy, FetchResult, ImageSource

__version__ = "0.1.0"

__all__ = [
    "AsyncImageFetcher",
    "CacheCoordinator",
    "CacheStats",
    "DiskStore",
    "FetchPolicy",
    "FetchResult",
    "ImageSource",
    "MemoryCache",
    "build_cache",
    "fetch_images",
    "fetch_images_async",
]
