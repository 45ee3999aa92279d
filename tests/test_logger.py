"""
Tests for logging configuration.
"""

import logging

import pytest

from label_service.logger import QUIET_LOGGERS, configure_logging, get_logger


@pytest.fixture
def restore_logging():
    yield
    configure_logging()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_explicit_level_applies_to_root(self, restore_logging):
        configure_logging(log_level="warning", development=False)

        assert logging.getLogger().level == logging.WARNING

    def test_debug_keeps_image_library_quiet(self, restore_logging):
        configure_logging(log_level="debug", development=True)

        assert logging.getLogger().level == logging.DEBUG
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.INFO

    def test_quiet_loggers_follow_stricter_levels(self, restore_logging):
        configure_logging(log_level="error")

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.ERROR

    def test_get_logger_accepts_extra_fields(self, restore_logging):
        configure_logging(log_level="info", development=False)

        get_logger("label_service.tests").info("Batch allocated", extra={"prefix": "T", "count": 3})
