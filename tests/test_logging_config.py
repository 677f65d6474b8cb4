import logging

import pytest
from pythonjsonlogger.json import JsonFormatter
from rich.logging import RichHandler

from profile_insights.logging_config import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_text_format_uses_rich(root_logger):
    handler = setup_logging("info", "text")
    assert isinstance(handler, RichHandler)
    assert root_logger.level == logging.INFO


def test_json_format(root_logger):
    handler = setup_logging("DEBUG", "json")
    assert isinstance(handler.formatter, JsonFormatter)
    assert root_logger.level == logging.DEBUG


def test_repeated_setup_replaces_handler(root_logger):
    first = setup_logging("WARNING", "text")
    second = setup_logging("WARNING", "json")
    assert first not in root_logger.handlers
    assert second in root_logger.handlers


def test_unknown_format():
    with pytest.raises(ValueError):
        setup_logging("INFO", "yaml")
