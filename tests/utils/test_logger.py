"""Tests for the application logger."""

import logging
import logging.handlers

from taskflow.utils import logger as logger_module
from taskflow.utils.logger import get_logger


def test_children_share_the_application_logger():
    root = get_logger()
    child = get_logger("sync.cache")

    assert root.name == "taskflow"
    assert child.name == "taskflow.sync.cache"
    assert root.propagate is False
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)


def test_initialised_once(monkeypatch):
    get_logger()
    calls = []
    monkeypatch.setattr(logger_module, "user_log_dir", lambda name: calls.append(name))
    get_logger("again")
    assert calls == []
