"""Configuration helpers for loading environment variables.

This module ensures that variables defined in a project-level ``.env`` file
are loaded before attempting to access them.  Consumers should rely on the
``get_env`` helper instead of using :func:`os.getenv` directly so that the
configuration is loaded in a single, well-defined place.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ValidationError


@lru_cache(maxsize=1)
def _load_environment() -> None:
    """Load environment variables from the project's ``.env`` file.

    The loader first attempts to read ``.env`` from the repository root.  If the
    file does not exist we still call :func:`load_dotenv` to allow the default
    discovery mechanism to run.  Subsequent calls are cached so the file is only
    read once per process.
    """

    project_root = Path(__file__).resolve().parents[1]
    env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value for ``key`` from the environment.

    Parameters
    ----------
    key:
        The name of the environment variable to look up.
    default:
        The value to return when ``key`` is not present.
    """

    _load_environment()
    return os.environ.get(key, default)


def _get_int(key: str, default: int, *, minimum: int, maximum: int | None = None) -> int:
    raw = get_env(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValidationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum or (maximum is not None and value > maximum):
        upper = "" if maximum is None else f" and {maximum}"
        raise ValidationError(f"{key} must be between {minimum}{upper}, got {value}")
    return value


@dataclass(frozen=True)
class GraphSettings:
    """Runtime settings shared by the store, traversal and interchange layers."""

    redis_url: str = "redis://localhost:6379/0"
    database: int = 0
    key_prefix: str = ""
    page_size: int = 100
    max_depth: int = 6
    default_node_label: str = "Node"
    default_relationship_type: str = "CONNECTED_TO"

    def __post_init__(self) -> None:
        if not 0 <= self.database <= 15:
            raise ValidationError(f"Redis database number must be between 0 and 15, got {self.database}")
        if self.page_size < 1:
            raise ValidationError(f"page_size must be positive, got {self.page_size}")
        if self.max_depth < 0:
            raise ValidationError(f"max_depth must not be negative, got {self.max_depth}")
        if not self.default_node_label:
            raise ValidationError("default_node_label must not be empty")
        if not self.default_relationship_type:
            raise ValidationError("default_relationship_type must not be empty")

    @classmethod
    def from_env(cls) -> "GraphSettings":
        """Build settings from ``GRAPHKV_*`` environment variables."""

        defaults = cls()
        return cls(
            redis_url=get_env("GRAPHKV_REDIS_URL", defaults.redis_url) or defaults.redis_url,
            database=_get_int("GRAPHKV_DATABASE", defaults.database, minimum=0, maximum=15),
            key_prefix=get_env("GRAPHKV_KEY_PREFIX", defaults.key_prefix) or "",
            page_size=_get_int("GRAPHKV_PAGE_SIZE", defaults.page_size, minimum=1),
            max_depth=_get_int("GRAPHKV_MAX_DEPTH", defaults.max_depth, minimum=0),
            default_node_label=get_env("GRAPHKV_DEFAULT_NODE_LABEL") or defaults.default_node_label,
            default_relationship_type=(
                get_env("GRAPHKV_DEFAULT_RELATIONSHIP_TYPE") or defaults.default_relationship_type
            ),
        )


__all__ = ["GraphSettings", "get_env"]
