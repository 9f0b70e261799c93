"""
Unit tests for the toolkit logger setup.
"""

import logging

import pytest

from raffle_toolkit.shared import logging as toolkit_logging
from raffle_toolkit.shared.logging import ROOT_LOGGER, get_logger


@pytest.fixture
def fresh_root():
    """Detach the namespace handler so setup runs again, then restore it."""
    root = logging.getLogger(ROOT_LOGGER)
    handlers, level = root.handlers[:], root.level
    root.handlers = []
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestGetLogger:
    def test_module_loggers_share_one_handler(self, fresh_root):
        first = get_logger("raffle_toolkit.raffles.fetcher")
        second = get_logger("raffle_toolkit.raffles.orchestrator")

        assert first.name == "raffle_toolkit.raffles.fetcher"
        assert first.handlers == [] and second.handlers == []
        assert len(fresh_root.handlers) == 1

        get_logger("raffle_toolkit.shared.retry")
        assert len(fresh_root.handlers) == 1

    def test_foreign_names_are_nested(self, fresh_root):
        assert get_logger("scripts").name == "raffle_toolkit.scripts"
        assert get_logger() is fresh_root

    def test_level_from_env(self, fresh_root, monkeypatch):
        monkeypatch.setenv("RAFFLE_LOG_LEVEL", "debug")

        get_logger("raffle_toolkit.cli")

        assert fresh_root.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("RAFFLE_LOG_LEVEL", "chatty")

        assert toolkit_logging._level_from_env() == logging.INFO
