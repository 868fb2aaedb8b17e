"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import structlog

from clashkeeper.core.logging import (
    ROOT_LOGGER_NAME,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


def read_events(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_level_filters_events(self, tmp_path: Path) -> None:
        """Test events below the configured level are dropped."""
        log_file = tmp_path / "out.log"
        configure_logging("WARNING", json_format=True, log_file=log_file)
        logger = get_logger("clashkeeper.tests")

        logger.info("Quiet")
        logger.warning("Loud", combatant_id="7")

        events = read_events(log_file)
        assert [e["event"] for e in events] == ["Loud"]
        assert events[0]["combatant_id"] == "7"
        assert events[0]["app"] == "clashkeeper"
        assert "timestamp" in events[0]

    def test_unknown_level_means_info(self) -> None:
        """Test an unrecognised level name falls back to INFO."""
        configure_logging("CHATTY")

        wrapper = structlog.get_config()["wrapper_class"]
        assert wrapper is structlog.make_filtering_bound_logger(logging.INFO)

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        """Test calling twice does not stack handlers."""
        configure_logging("INFO")
        configure_logging("INFO", log_file=tmp_path / "out.log")

        handlers = logging.getLogger(ROOT_LOGGER_NAME).handlers
        assert len(handlers) == 2
        assert sum(isinstance(h, logging.FileHandler) for h in handlers) == 1

    def test_http_libraries_quieted(self) -> None:
        """Test requests and urllib3 log at WARNING or above."""
        configure_logging("DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("requests").level == logging.WARNING

    def test_custom_app_tag(self, tmp_path: Path) -> None:
        """Test the app tag can be overridden."""
        log_file = tmp_path / "out.log"
        configure_logging("INFO", json_format=True, log_file=log_file, app="Arena")

        get_logger("clashkeeper.tests").info("Tagged")

        assert read_events(log_file)[0]["app"] == "Arena"


class TestContext:
    """Tests for bound logging context."""

    def test_bound_context_until_cleared(self, tmp_path: Path) -> None:
        """Test bound values appear on events until cleared."""
        log_file = tmp_path / "out.log"
        configure_logging("INFO", json_format=True, log_file=log_file)
        logger = get_logger("clashkeeper.tests")

        bind_context(acting_id="1", verb="rest")
        logger.info("Inside")
        clear_context()
        logger.info("Outside")

        inside, outside = read_events(log_file)
        assert inside["acting_id"] == "1"
        assert inside["verb"] == "rest"
        assert "acting_id" not in outside
