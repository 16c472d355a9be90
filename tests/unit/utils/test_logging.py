"""Unit tests for logging helpers."""

import pytest
from loguru import logger

from autoclean_wizard.utils.logging import LOG_LEVEL_ENV_VAR, LogLevel, configure_logger, message


@pytest.fixture
def captured():
    """Collect records emitted through loguru."""
    records = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="VALUES")
    yield records
    logger.remove(handler_id)


class TestLogLevel:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("debug", LogLevel.DEBUG),
            ("HEADER", LogLevel.HEADER),
            (True, LogLevel.INFO),
            (False, LogLevel.WARNING),
            (10, LogLevel.DEBUG),
            (35, LogLevel.WARNING),
            (1, LogLevel.VALUES),
            ("nonsense", LogLevel.INFO),
            (LogLevel.ERROR, LogLevel.ERROR),
        ],
    )
    def test_from_value(self, value, expected):
        assert LogLevel.from_value(value) == expected

    def test_none_reads_environment(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "error")
        assert LogLevel.from_value(None) == LogLevel.ERROR


class TestMessage:
    def test_custom_levels(self, captured):
        message("header", "Starting")
        message("values", "l_freq=1")

        assert [record["level"].name for record in captured] == ["HEADER", "VALUES"]
        assert captured[0]["message"] == "Starting"

    def test_lazy_formatting(self, captured):
        message("info", "Loaded {count} tasks", count=lambda: 3)
        assert captured[0]["message"] == "Loaded 3 tasks"


class TestConfigureLogger:
    def test_file_sink(self, tmp_path):
        log_dir = tmp_path / "logs"
        try:
            assert configure_logger("DEBUG", log_dir) == LogLevel.DEBUG
            message("info", "written to file")
            assert list(log_dir.glob("wizard_*.log"))
        finally:
            configure_logger()
