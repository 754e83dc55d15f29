"""Tests for logging utility."""

import logging
from io import StringIO


class TestLoggerConfiguration:
    """Test that logger configures correctly from settings."""

    def test_configure_logging_creates_logger(self):
        """configure_logging should return the package logger."""
        from cofounder_match.utils.logging import configure_logging

        logger = configure_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "cofounder_match"

    def test_configure_logging_respects_level(self):
        """Logger should respect the configured log level."""
        from cofounder_match.utils.logging import configure_logging

        logger = configure_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = configure_logging(level="WARNING")
        assert logger.level == logging.WARNING
        assert logger.handlers[0].level == logging.WARNING

    def test_configure_logging_installs_single_handler(self):
        """Repeated calls do not stack handlers."""
        from cofounder_match.utils.logging import configure_logging

        configure_logging()
        logger = configure_logging()

        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_default_level_comes_from_settings(self, monkeypatch):
        """Without an explicit level, LOG_LEVEL from the settings is used."""
        monkeypatch.setenv("LOG_LEVEL", "warning")

        from cofounder_match.utils.logging import configure_logging

        logger = configure_logging()

        assert logger.level == logging.WARNING

    def test_reconfigure_keeps_extra_handlers(self):
        """Only the package handler is managed; others are left alone."""
        from cofounder_match.utils.logging import HANDLER_NAME, configure_logging

        logger = configure_logging(level="INFO")
        extra = logging.NullHandler()
        logger.addHandler(extra)

        configure_logging(level="ERROR")

        assert extra in logger.handlers
        named = [h for h in logger.handlers if h.get_name() == HANDLER_NAME]
        assert len(named) == 1
        assert named[0].level == logging.ERROR

    def test_reset_logging_restores_propagation(self):
        """reset_logging removes handlers and re-enables propagation."""
        from cofounder_match.utils.logging import configure_logging, reset_logging

        logger = configure_logging()
        reset_logging()

        assert logger.handlers == []
        assert logger.propagate is True


class TestLogOutput:
    """Test that log output format is correct."""

    def test_module_loggers_use_package_format(self):
        """Messages from module loggers carry name and level."""
        from cofounder_match.utils.logging import configure_logging

        logger = configure_logging(level="INFO")

        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        logger.addHandler(handler)

        logging.getLogger("cofounder_match.matching.service").info("Scored 3 pairs")

        output = buffer.getvalue()
        assert "cofounder_match.matching.service - INFO - Scored 3 pairs" in output

    def test_debug_suppressed_at_info(self):
        """DEBUG messages are dropped at INFO level."""
        from cofounder_match.utils.logging import configure_logging

        logger = configure_logging(level="INFO")

        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        logger.addHandler(handler)

        logger.debug("hidden")

        assert buffer.getvalue() == ""


class TestGetLogger:
    """Test the get_logger convenience function."""

    def test_get_logger_returns_child_logger(self):
        """get_logger should return a child of the main logger."""
        from cofounder_match.utils.logging import configure_logging, get_logger

        configure_logging()

        logger = get_logger("cli")
        assert logger.name == "cofounder_match.cli"

    def test_get_logger_inherits_level(self):
        """Child logger should inherit parent's level."""
        from cofounder_match.utils.logging import configure_logging, get_logger

        configure_logging(level="DEBUG")

        logger = get_logger("test_module")
        assert logger.getEffectiveLevel() == logging.DEBUG
