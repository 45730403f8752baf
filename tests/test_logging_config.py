"""Tests for logging setup and credential masking."""

import logging

from common.logging_config import SensitiveDataFilter, get_logger, setup_logging


def make_record(msg, args=None):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_masks_bearer_token():
    record = make_record("Authorization: Bearer ya29.a0AfH6SMB")

    SensitiveDataFilter().filter(record)

    assert "ya29" not in record.msg
    assert "***MASKED***" in record.msg


def test_masks_access_token_in_args():
    record = make_record("config %s", ("access_token=tok-123",))

    SensitiveDataFilter().filter(record)

    assert record.args == ("access_token=***MASKED***",)


def test_plain_message_untouched():
    record = make_record("Uploaded chunk-1 to sa-1")

    SensitiveDataFilter().filter(record)

    assert record.msg == "Uploaded chunk-1 to sa-1"


def test_setup_logging_is_idempotent():
    logger = setup_logging("drivepool-test", "DEBUG")
    again = setup_logging("drivepool-test", "DEBUG")

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert isinstance(logger.handlers[0].filters[0], SensitiveDataFilter)


def test_get_logger_returns_named_logger():
    assert get_logger("uploader.retry").name == "uploader.retry"
