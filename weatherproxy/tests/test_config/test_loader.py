"""Tests for config loading, env overrides, and get/set."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from weatherproxy.config.loader import (
    apply_env_overrides,
    get_config_value,
    load_config,
    set_config_value,
)
from weatherproxy.config.schema import CacheBackend, ProxyConfig


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "server": {"port": 9000},
        "cache": {"backend": "memory", "ttl_minutes": 5},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


class TestLoadConfig:
    def test_load_from_yaml(self, config_yaml_path: Path):
        config = load_config(config_yaml_path, environ={})
        assert config.server.port == 9000
        assert config.cache.backend == CacheBackend.MEMORY
        assert config.cache.ttl_minutes == 5
        assert config.upstream.timeout_seconds == 2.0

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path, environ={})
        assert config == ProxyConfig()

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "nope.yaml", environ={})
        assert config.server.port == 8090

    def test_invalid_yaml_values(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("cache:\n  ttl_minutes: -1\n")
        with pytest.raises(ValidationError):
            load_config(path, environ={})

    def test_env_overrides(self, config_yaml_path: Path):
        config = load_config(
            config_yaml_path,
            environ={
                "WEATHER_API_KEY": "env-key",
                "WEATHERPROXY_PORT": "8181",
                "REDIS_HOST": "cache.internal",
                "REDIS_PORT": "6380",
            },
        )
        assert config.upstream.api_key == "env-key"
        assert config.server.port == 8181
        assert config.cache.host == "cache.internal"
        assert config.cache.port == 6380

    def test_empty_env_ignored(self):
        config = apply_env_overrides(ProxyConfig(), {"WEATHER_API_KEY": ""})
        assert config.upstream.api_key == ""

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("WEATHER_API_KEY", "from-os")
        assert load_config(None).upstream.api_key == "from-os"


class TestGetSetValue:
    def test_get(self):
        assert get_config_value(ProxyConfig(), "cache.ttl_minutes") == 600

    def test_get_missing(self):
        with pytest.raises(KeyError):
            get_config_value(ProxyConfig(), "cache.nope")

    def test_set_coerces_int(self):
        config = set_config_value(ProxyConfig(), "cache.ttl_minutes", "30")
        assert config.cache.ttl_minutes == 30

    def test_set_coerces_float(self):
        config = set_config_value(ProxyConfig(), "upstream.timeout_seconds", "1.5")
        assert config.upstream.timeout_seconds == 1.5

    def test_set_coerces_bool(self):
        config = set_config_value(ProxyConfig(), "logging.json_format", "true")
        assert config.logging.json_format is True

    def test_set_revalidates(self):
        with pytest.raises(ValidationError):
            set_config_value(ProxyConfig(), "server.port", "0")

    def test_set_unknown_key(self):
        with pytest.raises(KeyError):
            set_config_value(ProxyConfig(), "server.nope", "1")

    def test_set_returns_new_instance(self):
        original = ProxyConfig()
        updated = set_config_value(original, "server.host", "127.0.0.1")
        assert original.server.host == "0.0.0.0"
        assert updated.server.host == "127.0.0.1"
