import logging

import pytest

from api import config
from core import logging_setup


def test_parse_int_env_reads_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUIZ_TEST_INT", "42")
    assert config._parse_int_env("QUIZ_TEST_INT", 7) == 42


def test_parse_int_env_falls_back_on_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUIZ_TEST_INT", "forty-two")
    assert config._parse_int_env("QUIZ_TEST_INT", 7) == 7
    monkeypatch.delenv("QUIZ_TEST_INT")
    assert config._parse_int_env("QUIZ_TEST_INT", 7) == 7


def test_parse_float_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUIZ_TEST_FLOAT", "2.5")
    assert config._parse_float_env("QUIZ_TEST_FLOAT", 1.0) == 2.5
    monkeypatch.setenv("QUIZ_TEST_FLOAT", "")
    assert config._parse_float_env("QUIZ_TEST_FLOAT", 1.0) == 1.0


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert logging_setup._level_from_env(logging.INFO) == logging.ERROR
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert logging_setup._level_from_env(logging.INFO) == logging.INFO
    monkeypatch.delenv("LOG_LEVEL")
    assert logging_setup._level_from_env(logging.WARNING) == logging.WARNING


def test_setup_console_logging_does_not_duplicate_handlers(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    root = logging.getLogger()
    level = root.level
    try:
        logging_setup.setup_console_logging(logging.INFO)
        count = len(root.handlers)
        logging_setup.setup_console_logging(logging.DEBUG)
        assert len(root.handlers) == count
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(level)
