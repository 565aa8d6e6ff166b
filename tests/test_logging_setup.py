import json
import logging

import pytest
import structlog

from hollaex_sdk.config import LogFormat, LoggingConfig, LogLevel
from hollaex_sdk.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def restore_structlog():
    yield
    structlog.reset_defaults()
    logging.basicConfig(force=True, level=logging.WARNING)


def test_json_logging(capsys):
    setup_logging(LoggingConfig(format=LogFormat.JSON, level=LogLevel.INFO))

    structlog.get_logger("hollaex_sdk.test").info("stream_connecting", url="wss://example/stream")

    line = capsys.readouterr().out.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "stream_connecting"
    assert event["url"] == "wss://example/stream"
    assert event["level"] == "info"


def test_level_filtering(capsys):
    setup_logging(LoggingConfig(format=LogFormat.TEXT, level=LogLevel.WARNING))

    structlog.get_logger("hollaex_sdk.test").info("hidden_event")

    assert "hidden_event" not in capsys.readouterr().out
