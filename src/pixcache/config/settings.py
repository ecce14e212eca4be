"""Cache settings and where they come from.

``CacheConfig.load()`` layers its sources, each one overriding the last:

  field defaults
  < ~/.pixcache/config.yaml
  < nearest pixcache.yaml at or above the working directory
  < PIXCACHE_<FIELD> environment variables
  < keyword overrides (None means "leave unset")

Environment values arrive as strings and are coerced by the field types.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pixcache.config.defaults import (
    DEFAULT_CACHE_DIR,
    DEFAULT_COALESCE_REQUESTS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "PIXCACHE_"
USER_CONFIG_PATH = Path.home() / ".pixcache" / "config.yaml"
PROJECT_CONFIG_NAME = "pixcache.yaml"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class CacheConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    coalesce_requests: bool = DEFAULT_COALESCE_REQUESTS
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    max_concurrent: int = Field(default=DEFAULT_MAX_CONCURRENT, ge=1)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _expand_cache_dir(cls, value: object) -> object:
        if isinstance(value, str | Path):
            return Path(value).expanduser()
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def env_names(cls) -> dict[str, str]:
        """Environment variable name for each field."""
        return {f"{ENV_PREFIX}{name.upper()}": name for name in cls.model_fields}

    @classmethod
    def load(cls, **overrides: Any) -> CacheConfig:
        """Resolve every source into one validated config.

        Raises pydantic.ValidationError (a ValueError) if the merged values
        do not validate.
        """
        values: dict[str, Any] = {}
        for path in (USER_CONFIG_PATH, find_project_config()):
            if path is not None:
                values.update(read_config_file(path))
        values.update(cls.from_environ(os.environ))
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> dict[str, str]:
        """Raw PIXCACHE_* values keyed by field name, left for validation to coerce."""
        return {field: environ[var] for var, field in cls.env_names().items() if var in environ}


def find_project_config(start: Path | None = None) -> Path | None:
    """Closest pixcache.yaml in ``start`` (default: cwd) or one of its parents."""
    here = (start or Path.cwd()).resolve()
    candidates = (d / PROJECT_CONFIG_NAME for d in (here, *here.parents))
    return next((c for c in candidates if c.is_file()), None)


def read_config_file(path: Path) -> dict[str, Any]:
    """Mapping stored in a YAML file; empty if absent, unreadable or not a mapping."""
    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError:
        return {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring config file %s: %s", path, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Ignoring config file %s: top level is %s, not a mapping", path, type(data).__name__
        )
        return {}
    return data
