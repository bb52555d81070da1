"""Unit tests for the shared logger factory."""

import logging

import pytest

from pop_covid.logging_config import create_logger, log_exception


@pytest.mark.unit
class TestCreateLogger:

    def test_console_only(self):
        logger = create_logger("pop_covid.test_console")

        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_handlers_not_duplicated(self):
        create_logger("pop_covid.test_repeat")
        logger = create_logger("pop_covid.test_repeat")
        assert len(logger.handlers) == 1

    def test_file_logging(self, tmp_path):
        logger = create_logger("pop_covid.test_file", log_dir=str(tmp_path / "logs"))

        logger.warning("3 country name(s) not found")
        log_exception(logger, ValueError("boom"), context="unit test")
        for h in logger.handlers:
            h.flush()

        text = (tmp_path / "logs" / "pop_covid.test_file.log").read_text()
        assert "3 country name(s) not found" in text
        assert "Error Type: ValueError" in text
        assert "Context: unit test" in text
