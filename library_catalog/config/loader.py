"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file first, then deep-merges the values
resolved by :class:`Settings` on top.  Per-entity cache capacities only
exist in YAML; :func:`cache_capacities` falls back to the global
``cache_capacity`` setting for any entity type the file leaves out.
"""

from pathlib import Path

import yaml

from library_catalog.config.settings import Settings
from library_catalog.utils.errors import ConfigurationError

_ENTITY_CACHES = ("author", "book", "category")


def load_config(path: str | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file. Defaults to ``settings.config_path``.
        settings: Resolved settings; a fresh :class:`Settings` is built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.config_path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Malformed config file {config_path}: {exc}") from exc
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "cache": {
            "default_capacity": settings.cache_capacity,
        },
        "reports": {
            "source_dir": settings.reports_source_dir,
            "source_pattern": settings.reports_source_pattern,
            "output_dir": settings.reports_output_dir,
            "workers": settings.report_workers,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def cache_capacities(config: dict) -> dict[str, int]:
    """Return the capacity for each entity result cache.

    Raises:
        ConfigurationError: if a configured capacity is not a positive integer.
    """
    cache_cfg = config.get("cache", {})
    default = cache_cfg.get("default_capacity", 100)
    per_entity = cache_cfg.get("capacities") or {}

    capacities: dict[str, int] = {}
    for entity in _ENTITY_CACHES:
        value = per_entity.get(entity, default)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigurationError(
                f"cache.capacities.{entity} must be a positive integer, got {value!r}"
            )
        capacities[entity] = value
    return capacities


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
