import logging

import pytest

from shortener_platform.logging_config import LOG_FORMAT, initialize_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


def test_level_is_applied():
    initialize_logging("debug")
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(h.formatter is not None and h.formatter._fmt == LOG_FORMAT for h in root.handlers)


def test_unknown_level_falls_back_to_info():
    initialize_logging("chatty")
    assert logging.getLogger().level == logging.INFO


def test_existing_loggers_stay_enabled():
    named = logging.getLogger("shortener.manager")
    initialize_logging("warning")
    assert named.disabled is False
