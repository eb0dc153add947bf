"""Unit tests for core.logger."""

import logging

from kagi_trader.core.logger import setup_logging


def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging("debug", tmp_path / "logs", "bot.log")
    logging.getLogger("kagi_trader.test").debug("hello %s", "file")
    for handler in logger.handlers:
        handler.flush()
    assert logger.level == logging.DEBUG
    assert "| DEBUG    | kagi_trader.test | hello file" in (tmp_path / "logs" / "bot.log").read_text()


def test_setup_logging_is_idempotent():
    setup_logging("INFO")
    logger = setup_logging("WARNING")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
