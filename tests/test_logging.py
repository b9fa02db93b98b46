from __future__ import annotations

import io
import json
import logging

from taskhub.core.config import Settings
from taskhub.core.context import bind_request_id, reset_request_id
from taskhub.core.logging import configure_logging


def test_configure_logging_outputs_json_with_request_id() -> None:
    settings = Settings(environment="test", log_level="INFO")
    configure_logging(settings)

    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    assert handler is not None, "Expected JSON stream handler to be configured"

    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)

    token = bind_request_id("req-json-1")
    try:
        logger = logging.getLogger("taskhub.tests.logging")
        logger.info("Member added", extra={"project_id": 3, "role": "tester"})
    finally:
        handler.flush()
        reset_request_id(token)
        handler.setStream(previous_stream)

    log_lines = buffer.getvalue().strip().splitlines()
    assert log_lines, "Expected structured log line to be captured"
    payload = json.loads(log_lines[-1])

    assert payload["message"] == "Member added"
    assert payload["request_id"] == "req-json-1"
    assert payload["environment"] == "test"
    assert payload["service"] == settings.project_name
    assert payload["level"] == "INFO"
    assert payload["project_id"] == 3
    assert payload["role"] == "tester"


def test_log_level_follows_environment_profile() -> None:
    configure_logging(Settings(environment="test"))
    assert logging.getLogger().level == logging.WARNING

    configure_logging(Settings(environment="ci"))
    assert logging.getLogger().level == logging.INFO
