"""Unit tests for the structlog configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from library_catalog.utils.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    yield
    configure_logging()


def _renderer() -> object:
    return structlog.get_config()["processors"][-1]


class TestConfigureLogging:
    def test_development_uses_console_renderer(self) -> None:
        configure_logging(app_env="development")
        assert isinstance(_renderer(), structlog.dev.ConsoleRenderer)

    def test_production_uses_json_renderer(self) -> None:
        configure_logging(app_env="production")
        assert isinstance(_renderer(), structlog.processors.JSONRenderer)

    def test_json_can_be_forced(self) -> None:
        configure_logging(app_env="development", json_output=True)
        assert isinstance(_renderer(), structlog.processors.JSONRenderer)

    def test_environment_variable_is_not_consulted(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        configure_logging(app_env="development")
        assert isinstance(_renderer(), structlog.dev.ConsoleRenderer)

    def test_level_applies_to_stdlib_root_logger(self) -> None:
        configure_logging(log_level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_get_logger_returns_usable_logger(self) -> None:
        logger = get_logger("library_catalog.tests")
        logger.info("logging_smoke_test", value=1)
