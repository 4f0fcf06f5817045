"""YAML config loader with environment overrides and dotted get/set."""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from weatherproxy.config.defaults import ENV_OVERRIDES
from weatherproxy.config.schema import ProxyConfig

logger = logging.getLogger(__name__)


def load_config(
    path: str | Path | None = None, environ: Mapping[str, str] | None = None
) -> ProxyConfig:
    """Load and validate config from a YAML file, then apply env overrides.

    A missing path or empty document yields the defaults.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            logger.info("Config file %s not found, using defaults", path)

    config = ProxyConfig(**raw)
    return apply_env_overrides(config, os.environ if environ is None else environ)


def apply_env_overrides(config: ProxyConfig, environ: Mapping[str, str]) -> ProxyConfig:
    """Apply the ENV_OVERRIDES variables that are set and non-empty."""
    for var, dotted_key in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            config = set_config_value(config, dotted_key, value)
    return config


def get_config_value(config: ProxyConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'cache.ttl_minutes'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: ProxyConfig, dotted_key: str, value: Any) -> ProxyConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new ProxyConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        if not isinstance(target, dict) or part not in target:
            raise KeyError(f"Config key not found: {dotted_key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    # Attempt type coercion for common cases
    old_value = target.get(parts[-1])
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.strip().lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return ProxyConfig(**data)
