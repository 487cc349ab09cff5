"""Shared test fixtures for HNScribe tests."""

import shutil
import tempfile
from pathlib import Path

import pytest

from hnscribe.core.config_manager import CONFIG_ENV_VAR, ConfigManager
from tests.helpers.hn_fixtures import comment_row, item_page


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Point ConfigManager at a throwaway settings.yaml and reset the singleton."""
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "config" / "settings.yaml"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def sample_page():
    """Item page with levels [0, 1, 1, 2, 0, 1]."""
    levels = [0, 1, 1, 2, 0, 1]
    rows = [comment_row(str(2000 + i), level, author=f"user{i}", body=f"<p>body {i}</p>")
            for i, level in enumerate(levels)]
    return item_page(rows)
