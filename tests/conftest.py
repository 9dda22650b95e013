"""Pytest fixtures for AI Session Tools tests."""

import logging

import pytest

from ai_session_tools.config import ENV_MAPPINGS
from ai_session_tools.services.path_constants import LOG_FILENAME


@pytest.fixture(autouse=True)
def _clear_env_overrides(monkeypatch):
    """Keep the developer's environment from leaking into config tests."""
    for env_var in ENV_MAPPINGS:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture(autouse=True)
def _reset_root_handlers():
    """Drop handlers installed by setup_logging so they don't outlive a test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler).__module__.startswith("logging"):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def make_log(tmp_path):
    """Write a progress log into tmp_path and return its path."""

    def _make_log(content: str, name: str = LOG_FILENAME):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _make_log
