"""Configuration module -- exports Settings and the YAML loader helpers."""

from library_catalog.config.loader import cache_capacities, load_config
from library_catalog.config.settings import Settings

__all__ = ["Settings", "cache_capacities", "load_config"]
