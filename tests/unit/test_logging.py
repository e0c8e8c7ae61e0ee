"""
Unit tests for logging setup
"""

import logging
import pytest
from unittest.mock import patch
from core.logging import setup_logging, NOISY_LOGGERS


@pytest.fixture(autouse=True)
def restore_levels():
    levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:
    def test_driver_and_scheduler_loggers_quietened(self):
        setup_logging()

        for name in ("asyncpg", "apscheduler.executors.default", "sqlalchemy.engine", "httpx"):
            assert name in NOISY_LOGGERS
            assert logging.getLogger(name).level >= logging.WARNING

    def test_noisy_loggers_follow_stricter_level(self):
        with patch("core.logging.settings") as mock_settings:
            mock_settings.LOG_LEVEL = "ERROR"
            mock_settings.ENVIRONMENT = "test"
            mock_settings.IMPORT_INTERVAL_MINUTES = 60
            setup_logging()

        assert logging.getLogger("asyncpg").level == logging.ERROR
