"""Error handling — exception hierarchy for network, codec and disk failures."""

from pixcache.errors.exceptions import (
    DecodeError,
    DirectoryEnumerationError,
    DiskError,
    DiskReadError,
    DiskWriteError,
    EncodeError,
    NetworkError,
    PixCacheError,
)

__all__ = [
    "PixCacheError",
    "NetworkError",
    "DecodeError",
    "EncodeError",
    "DiskError",
    "DiskWriteError",
    "DiskReadError",
    "DirectoryEnumerationError",
]
