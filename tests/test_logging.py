"""
Tests for the shared logging helpers.
"""
import io
import json
import logging
from uuid import uuid4

import pytest

from cycle_tracker.utils.logging import SingleLineLogger, format_exception, log_exception


@pytest.fixture
def log_stream():
    """Create a SingleLineLogger writing to an in-memory stream."""
    stream = io.StringIO()
    test_logger = SingleLineLogger(
        service=f"cycle_tracker_test_{uuid4().hex}",
        logger_handler=logging.StreamHandler(stream)
    )
    return test_logger, stream


def records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_format_exception_from_instance():
    try:
        raise ValueError("bad value")
    except ValueError as e:
        error = e

    line = format_exception(error)
    assert "\n" not in line
    assert "ValueError: bad value" in line
    assert " | " in line


def test_format_exception_without_active_exception():
    assert format_exception(True) is None
    assert format_exception(None) is None


def test_exception_is_single_line(log_stream):
    test_logger, stream = log_stream
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        test_logger.exception("Request failed")

    (record,) = records(stream)
    assert record["message"] == "Request failed"
    assert "RuntimeError: boom" in record["exception"]
    assert "\n" not in record["exception"]


def test_log_exception_helper(log_stream):
    test_logger, stream = log_stream
    try:
        raise KeyError("missing")
    except KeyError:
        log_exception(test_logger, "Lookup failed", extra={"user_id": "123"})

    (record,) = records(stream)
    assert record["level"] == "ERROR"
    assert record["user_id"] == "123"
    assert "KeyError" in record["exception"]


def test_bind_user(log_stream):
    test_logger, stream = log_stream
    test_logger.bind_user("u-1")
    test_logger.info("tagged")
    test_logger.bind_user(None)
    test_logger.info("untagged")

    tagged, untagged = records(stream)
    assert tagged["user_id"] == "u-1"
    assert "user_id" not in untagged
