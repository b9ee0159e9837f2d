import logging

import pytest
from pythonjsonlogger import jsonlogger

import tableview
from tableview.logging_config import configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    package = logging.getLogger("tableview")
    saved = list(root.handlers), package.level
    yield root, package
    root.handlers[:] = saved[0]
    package.setLevel(saved[1])


def test_package_logger_has_null_handler():
    package = logging.getLogger(tableview.__name__)
    assert any(isinstance(h, logging.NullHandler) for h in package.handlers)


def test_json_formatter_by_default(monkeypatch, restore_logging):
    root, package = restore_logging
    monkeypatch.delenv("TABLEVIEW_LOG_FORMAT", raising=False)
    monkeypatch.delenv("TABLEVIEW_LOG_LEVEL", raising=False)

    configure_logging()

    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert package.level == logging.INFO


def test_plain_format_and_level_names(monkeypatch, restore_logging):
    root, package = restore_logging
    monkeypatch.setenv("TABLEVIEW_LOG_LEVEL", "debug")

    configure_logging(force_format="plain")
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert package.level == logging.DEBUG

    configure_logging(level="WARNING", force_format="plain")
    assert package.level == logging.WARNING

    with pytest.raises(ValueError):
        configure_logging(level="chatty")
