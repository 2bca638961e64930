"""
Tests for the project logger: request id binding, JSON output and the
execution time decorator.
"""

import json
import logging

import pytest

from patient_dashboard.common.logger import (
    APP_LOGGER_NAME,
    JsonFormatter,
    RequestContextFilter,
    bind_request_id,
    configure_logger,
    current_request_id,
    get_logger,
    log_execution_time,
    reset_request_id,
)


def make_record(message="hello", data=None):
    record = logging.LogRecord("patient_dashboard.test", logging.INFO, __file__, 1, message, None, None)
    if data is not None:
        record.data = data
    return record


def test_request_id_defaults_to_dash_and_resets():
    assert current_request_id() == "-"

    token = bind_request_id("abc-123")
    assert current_request_id() == "abc-123"

    reset_request_id(token)
    assert current_request_id() == "-"


def test_filter_and_json_formatter_carry_request_id_and_data():
    record = make_record(data={"status": 201, "path": "/api/v1/medications"})
    token = bind_request_id("req-1")
    try:
        RequestContextFilter().filter(record)
    finally:
        reset_request_id(token)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["requestId"] == "req-1"
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["status"] == 201
    assert payload["path"] == "/api/v1/medications"


def test_get_logger_stays_inside_project_hierarchy():
    assert get_logger("patient_dashboard.users.service").name == "patient_dashboard.users.service"
    assert get_logger("scripts").name == f"{APP_LOGGER_NAME}.scripts"


def test_configure_logger_replaces_handlers(tmp_path):
    name = f"{APP_LOGGER_NAME}.configure_test"
    log_file = tmp_path / "logs" / "app.log"

    configure_logger(level="debug", log_file=str(log_file), name=name)
    logger = configure_logger(level="warning", log_file=str(log_file), name=name)

    try:
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2
        assert log_file.parent.is_dir()
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.messages = []

    def emit(self, record):
        self.messages.append((record.levelno, record.getMessage()))


@pytest.fixture
def timing_logger():
    logger = logging.getLogger(f"{APP_LOGGER_NAME}.timing_test")
    logger.setLevel(logging.DEBUG)
    handler = RecordingHandler()
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)


def test_log_execution_time_sync(timing_logger):
    logger, handler = timing_logger

    @log_execution_time(logger)
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    assert handler.messages[-1][0] == logging.DEBUG
    assert "add executed in" in handler.messages[-1][1]


@pytest.mark.asyncio
async def test_log_execution_time_async_reraises(timing_logger):
    logger, handler = timing_logger

    @log_execution_time(logger)
    async def explode():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await explode()

    level, message = handler.messages[-1]
    assert level == logging.ERROR
    assert "explode failed after" in message
    assert "boom" in message
