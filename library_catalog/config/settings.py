"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (in priority order) environment variables, then the
``.env`` file in the working directory, then the defaults below.  Field
``cache_capacity`` maps to env var ``CACHE_CAPACITY`` and so on.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library catalogue application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Result caches ===
    # Default bound for each per-entity result cache; config.yaml may
    # override it per entity type.
    cache_capacity: int = Field(default=100, ge=1)

    # === Log report generation ===
    reports_source_dir: str = "logs"
    # Daily application log name; ``{date}`` is replaced by the ISO date.
    reports_source_pattern: str = "library-{date}.log"
    reports_output_dir: str = "logs/generated_reports"
    report_workers: int = Field(default=4, ge=1)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8080
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"
