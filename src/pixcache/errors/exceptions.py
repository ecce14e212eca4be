"""Custom exception hierarchy for pixcache."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class PixCacheError(Exception):
    """Base exception for all pixcache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(PixCacheError):
    """Fetch did not return bytes.

    Examples: connection refused, timeout, 404, 500.
    """

    def __init__(
        self,
        message: str = "",
        address: str = "",
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.address = address
        self.http_status = http_status
        self.original = original


class DecodeError(PixCacheError):
    """Bytes are not a valid image."""

    def __init__(
        self,
        message: str = "",
        size_bytes: int = 0,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.size_bytes = size_bytes
        self.original = original


class EncodeError(PixCacheError):
    """An image could not be encoded for storage."""

    def __init__(self, message: str = "", original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class DiskError(PixCacheError):
    """Base for disk-tier failures. Best-effort, never fatal."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class DiskWriteError(DiskError):
    """Cache file could not be written."""


class DiskReadError(DiskError):
    """Cache file could not be read. Treated the same as absent."""


class DirectoryEnumerationError(DiskError):
    """Cache directory could not be listed during a bulk clear."""
