"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path

# Default cache settings
DEFAULT_CACHE_DIR = str(Path.home() / ".pixcache" / "images")
DEFAULT_COALESCE_REQUESTS = False

# Default network settings
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "pixcache/0.1"

# Default concurrency settings
DEFAULT_MAX_CONCURRENT = 8

# Log level
DEFAULT_LOG_LEVEL = "WARNING"
