from __future__ import annotations

import logging
from io import StringIO

from workorder_docs.logging.init import (
    SUMMARY_LEVEL,
    LabeledFormatter,
    enable_debug,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    """Test that setup_logging creates a logger with labeled format."""
    logger = setup_logging()

    assert logger.name == "workorder_docs"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    assert setup_logging() is setup_logging()
    assert get_logger() is setup_logging()
    assert len(get_logger().handlers) == 1


def test_reset_then_setup_does_not_duplicate_handlers():
    setup_logging()
    reset_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_labeled_prefixes(capsys):
    """INFO|WARN|ERROR|SUMMARY labels prefix every line on stdout."""
    logger = setup_logging()
    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    log_summary("files=1 success=1")

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY files=1 success=1",
    ]


def test_module_loggers_share_app_handler(capsys):
    setup_logging()
    logging.getLogger("workorder_docs.services.requests").info("from a module")
    assert capsys.readouterr().out == "INFO from a module\n"


def test_debug_hidden_until_enabled(capsys):
    logger = setup_logging()
    logger.debug("hidden")
    assert capsys.readouterr().out == ""

    enable_debug()
    logger.debug("visible")
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG visible" in out


def test_formatter_falls_back_to_level_name():
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger = logging.getLogger("test_workorder_docs_formatter")
    logger.handlers[:] = [handler]
    logger.propagate = False
    logger.setLevel(1)

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger.log(SUMMARY_LEVEL, "done")
    logger.log(15, "custom")

    assert stream.getvalue().splitlines() == ["SUMMARY done", "Level 15 custom"]
