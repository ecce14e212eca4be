"""Shared Pydantic models for pixcache."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from PIL import Image
from pydantic import BaseModel

# ── Enums ──


class FetchPolicy(StrEnum):
    CACHE_FIRST = "cache_first"
    CACHE_THEN_REFRESH = "cache_then_refresh"


class ImageSource(StrEnum):
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"


# ── Callbacks ──

ResultCallback = Callable[[Image.Image], Any]
ErrorCallback = Callable[[Exception], Any]


# ── Runtime models ──


class FetchResult(BaseModel):
    identifier: str
    image: Image.Image
    source: ImageSource
    model_config = {"arbitrary_types_allowed": True}

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size
