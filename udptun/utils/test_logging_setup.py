"""
Tests for logging configuration.
"""
import logging
import logging.handlers

from udptun.utils.logging_setup import setup_logging


def test_console_only_by_default():
    logger = setup_logging("udptun_test_console", log_level="DEBUG")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)


def test_file_handler_added(tmp_path):
    log_file = tmp_path / "logs" / "udptun.log"
    logger = setup_logging("udptun_test_file", log_file=str(log_file))

    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
    assert log_file.exists()
    for handler in logger.handlers:
        handler.close()


def test_unusable_log_file_keeps_console_logging(tmp_path):
    # A regular file where a directory is expected
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    logger = setup_logging("udptun_test_badfile", log_file=str(blocker / "sub" / "x.log"))

    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)


def test_repeated_setup_does_not_duplicate_handlers():
    setup_logging("udptun_test_repeat")
    logger = setup_logging("udptun_test_repeat")
    assert len(logger.handlers) == 1
