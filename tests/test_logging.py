"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sandboxscan.commands import CommandRunner
from sandboxscan.logging import COMMANDS_CHANNEL, configure_logging, get_logger, get_session_logger
from tests._fixtures.sandbox import FakeSandbox


@pytest.fixture(autouse=True)
def _reset_logging():  # type: ignore[no-untyped-def]
    yield
    configure_logging()


def test_verbose_keeps_command_traffic_quiet() -> None:
    configure_logging(verbose=True)

    assert get_logger("session").isEnabledFor(logging.DEBUG)
    assert not get_logger(COMMANDS_CHANNEL).isEnabledFor(logging.DEBUG)


def test_trace_commands_opens_command_channel() -> None:
    configure_logging(trace_commands=True)

    assert get_logger(COMMANDS_CHANNEL).isEnabledFor(logging.DEBUG)


def test_reconfiguring_does_not_stack_handlers() -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1


def test_log_file_records_command_traffic(tmp_path: Path) -> None:
    log_file = tmp_path / "scan.log"
    configure_logging(log_file=log_file)

    CommandRunner(FakeSandbox({"a.js": "x"})).run("cat", ["./a.js"])
    for handler in logging.getLogger("sandboxscan").handlers:
        handler.flush()

    assert "Running cat ./a.js" in log_file.read_text(encoding="utf-8")


def test_session_logger_tags_records_with_sandbox(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("sandboxscan")
    logger.propagate = True
    try:
        with caplog.at_level(logging.INFO, logger="sandboxscan"):
            get_session_logger("session", "web-1").info("Built manifest")
    finally:
        logger.propagate = False

    record = caplog.records[-1]
    assert record.getMessage() == "[web-1] Built manifest"
    assert record.sandbox == "web-1"
