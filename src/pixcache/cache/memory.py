"""L1 in-memory image cache."""

from __future__ import annotations

import threading

from PIL import Image


class MemoryCache:
    """Unbounded, lock-guarded key -> image map. No eviction."""

    def __init__(self) -> None:
        self._store: dict[str, Image.Image] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Image.Image | None:
        with self._lock:
            return self._store.get(key)

    def set(self, key: str, image: Image.Image) -> None:
        with self._lock:
            self._store[key] = image

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
