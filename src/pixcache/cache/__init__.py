"""Cache subsystem — two-tier (memory + disk) with network fallback."""

from pixcache.cache.disk import DiskStore
from pixcache.cache.keys import canonical_key, disk_filename, encode_identifier
from pixcache.cache.manager import CacheCoordinator
from pixcache.cache.memory import MemoryCache
from pixcache.cache.stats import CacheStats

__all__ = [
    "CacheCoordinator",
    "CacheStats",
    "DiskStore",
    "MemoryCache",
    "canonical_key",
    "disk_filename",
    "encode_identifier",
]
