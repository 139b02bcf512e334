"""Tests for logging setup."""

import json
import logging

import pytest
import structlog

from procinv.log import configure_logging


@pytest.fixture
def reset_logging():
    yield
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], level=logging.WARNING, force=True)


def test_events_written_to_file(tmp_path, reset_logging):
    """Test events at or above the level land in the log file as JSON."""
    log_file = tmp_path / "procinv.log"
    configure_logging("info", log_file=str(log_file), json_output=True)
    logger = structlog.get_logger("procinv.test")

    logger.debug("hidden_event")
    logger.info("command_failed", command="svcs -p")
    logging.getLogger().handlers[0].flush()

    lines = log_file.read_text().splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert event["event"] == "command_failed"
    assert event["command"] == "svcs -p"
    assert event["level"] == "info"
    assert event["logger"] == "procinv.test"


def test_unknown_level_defaults_to_warning(tmp_path, reset_logging):
    configure_logging("chatty", log_file=str(tmp_path / "procinv.log"))

    assert logging.getLogger().level == logging.WARNING
