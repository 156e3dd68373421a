"""Tests for :mod:`graphkv.config`."""

from __future__ import annotations

from pathlib import Path

import pytest

from graphkv import config
from graphkv.config import GraphSettings
from graphkv.errors import ValidationError


PROJECT_ROOT = Path(config.__file__).resolve().parents[1]

ENV_KEYS = (
    "GRAPHKV_REDIS_URL",
    "GRAPHKV_DATABASE",
    "GRAPHKV_KEY_PREFIX",
    "GRAPHKV_PAGE_SIZE",
    "GRAPHKV_MAX_DEPTH",
    "GRAPHKV_DEFAULT_NODE_LABEL",
    "GRAPHKV_DEFAULT_RELATIONSHIP_TYPE",
)


@pytest.fixture
def clean_env(monkeypatch):
    config._load_environment.cache_clear()
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield monkeypatch
    config._load_environment.cache_clear()


def test_get_env_prefers_process_environment(clean_env):
    """Explicit environment variables should win over the file contents."""

    clean_env.setenv("GRAPHKV_KEY_PREFIX", "in-memory:")

    assert config.get_env("GRAPHKV_KEY_PREFIX") == "in-memory:"


def test_get_env_returns_default_when_missing(clean_env):
    clean_env.delenv("GRAPHKV_DOES_NOT_EXIST", raising=False)

    assert config.get_env("GRAPHKV_DOES_NOT_EXIST", default="fallback") == "fallback"


def test_get_env_reads_project_dotenv_after_cache_clear(clean_env):
    """Clearing the cache allows the loader to pick up updated ``.env`` values."""

    env_file = PROJECT_ROOT / ".env"
    original_contents = env_file.read_text() if env_file.exists() else None
    key = "GRAPHKV_TEST_TEMP"
    try:
        env_file.write_text(f"{original_contents or ''}\n{key}=first\n")
        config._load_environment.cache_clear()
        clean_env.delenv(key, raising=False)
        assert config.get_env(key) == "first"

        env_file.write_text(f"{original_contents or ''}\n{key}=second\n")
        clean_env.delenv(key, raising=False)
        assert config.get_env(key) is None

        config._load_environment.cache_clear()
        assert config.get_env(key) == "second"
    finally:
        if original_contents is None:
            env_file.unlink()
        else:
            env_file.write_text(original_contents)
        clean_env.delenv(key, raising=False)


def test_settings_defaults(clean_env):
    settings = GraphSettings.from_env()

    assert settings == GraphSettings()
    assert settings.page_size == 100
    assert settings.max_depth == 6
    assert settings.default_relationship_type == "CONNECTED_TO"


def test_settings_read_from_environment(clean_env):
    clean_env.setenv("GRAPHKV_REDIS_URL", "redis://cache:6380/0")
    clean_env.setenv("GRAPHKV_DATABASE", "3")
    clean_env.setenv("GRAPHKV_KEY_PREFIX", "g:")
    clean_env.setenv("GRAPHKV_PAGE_SIZE", "25")
    clean_env.setenv("GRAPHKV_MAX_DEPTH", "0")
    clean_env.setenv("GRAPHKV_DEFAULT_NODE_LABEL", "Entity")

    settings = GraphSettings.from_env()

    assert settings.redis_url == "redis://cache:6380/0"
    assert settings.database == 3
    assert settings.key_prefix == "g:"
    assert settings.page_size == 25
    assert settings.max_depth == 0
    assert settings.default_node_label == "Entity"


@pytest.mark.parametrize(
    "key, value",
    [
        ("GRAPHKV_DATABASE", "16"),
        ("GRAPHKV_DATABASE", "-1"),
        ("GRAPHKV_DATABASE", "two"),
        ("GRAPHKV_PAGE_SIZE", "0"),
        ("GRAPHKV_MAX_DEPTH", "-2"),
    ],
)
def test_settings_reject_out_of_range_values(clean_env, key, value):
    clean_env.setenv(key, value)

    with pytest.raises(ValidationError, match=key):
        GraphSettings.from_env()


def test_settings_validate_direct_construction():
    with pytest.raises(ValidationError, match="between 0 and 15"):
        GraphSettings(database=20)
    with pytest.raises(ValidationError):
        GraphSettings(default_node_label="")
