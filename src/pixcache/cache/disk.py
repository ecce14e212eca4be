"""L2 disk cache — one PNG file per identifier."""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from pathlib import Path

from PIL import Image

from pixcache.cache.keys import disk_filename
from pixcache.config.defaults import DEFAULT_CACHE_DIR
from pixcache.errors.exceptions import (
    DecodeError,
    DirectoryEnumerationError,
    DiskReadError,
    DiskWriteError,
    EncodeError,
)
from pixcache.utils.image import decode_image, encode_png

logger = logging.getLogger(__name__)

_TEMP_PREFIX = ".tmp-"


class DiskStore:
    """Filesystem-backed image store keyed by a stable filename encoding.

    Every method is best-effort: failures are logged and degrade to
    "absent" / False, they never propagate to the caller.
    """

    def __init__(self, cache_dir: Path | str | None = None) -> None:
        self._cache_dir = Path(cache_dir) if cache_dir else Path(DEFAULT_CACHE_DIR)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create cache directory %s: %s", self._cache_dir, e)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, identifier: object) -> Path:
        """Cache file path for an identifier. Performs no I/O."""
        return self._cache_dir / disk_filename(identifier)

    def save(self, image: Image.Image, identifier: object) -> bool:
        """Encode as PNG and write atomically. Returns False on any failure."""
        path = self.path_for(identifier)
        try:
            data = encode_png(image)
            self._write_atomic(path, data)
        except (EncodeError, DiskWriteError) as e:
            logger.warning("Disk cache write skipped for %s: %s", identifier, e)
            return False
        logger.debug("Saved %d bytes to %s", len(data), path)
        return True

    def load(self, identifier: object) -> Image.Image | None:
        """Read and decode the cached image, or None if absent or unreadable."""
        path = self.path_for(identifier)
        try:
            data = self._read_bytes(path)
        except DiskReadError as e:
            logger.warning("Disk cache read failed for %s: %s", identifier, e)
            return None
        if data is None:
            return None
        try:
            return decode_image(data)
        except DecodeError as e:
            logger.warning("Corrupt disk cache entry %s: %s", path, e)
            return None

    def contains(self, identifier: object) -> bool:
        return self.path_for(identifier).is_file()

    def clear(self) -> int:
        """Delete every entry in the cache directory. Returns count deleted."""
        try:
            entries = self._list_entries()
        except DirectoryEnumerationError as e:
            logger.error("Failed to clear disk cache: %s", e)
            return 0

        removed = 0
        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Could not delete cache entry %s: %s", entry, e)
        logger.info("Cleared %d disk cache entries from %s", removed, self._cache_dir)
        return removed

    @property
    def entry_count(self) -> int:
        try:
            return sum(1 for p in self._list_entries() if _is_cache_file(p))
        except DirectoryEnumerationError:
            return 0

    @property
    def size_mb(self) -> float:
        total = 0
        try:
            entries = self._list_entries()
        except DirectoryEnumerationError:
            return 0.0
        for p in entries:
            if _is_cache_file(p):
                with contextlib.suppress(OSError):
                    total += p.stat().st_size
        return total / (1024 * 1024)

    def _list_entries(self) -> list[Path]:
        try:
            return list(self._cache_dir.iterdir())
        except OSError as e:
            raise DirectoryEnumerationError(
                f"Cannot list {self._cache_dir}: {e}", path=self._cache_dir, original=e
            ) from e

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=_TEMP_PREFIX, dir=path.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise DiskWriteError(f"Cannot write {path}: {e}", path=path, original=e) from e

    @staticmethod
    def _read_bytes(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise DiskReadError(f"Cannot read {path}: {e}", path=path, original=e) from e


def _is_cache_file(path: Path) -> bool:
    return path.is_file() and not path.name.startswith(_TEMP_PREFIX)
