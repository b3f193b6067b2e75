"""Shared test fixtures for redtools tests."""

import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from redtools.core.config_manager import ConfigManager, DEFAULT_CONFIG


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture(autouse=True)
def app_home_dir(tmp_path, monkeypatch):
    """Point the per-user data directory at a temporary location."""
    home = tmp_path / "redtools-home"
    monkeypatch.setenv("REDTOOLS_HOME", str(home))
    return home


@pytest.fixture
def config_file(tmp_dir):
    """Create a temporary settings.yaml with test credentials and return its path."""
    config_dir = tmp_dir / "config"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "settings.yaml"

    config = ConfigManager._deep_copy(DEFAULT_CONFIG)
    config["gemini"]["api_key"] = "test-key"
    config["reddit"].update({
        "client_id": "cid",
        "client_secret": "secret",
        "username": "user",
        "password": "pass",
        "fetch_delay_sec": 0,
    })
    config["shared"]["store_path"] = str(tmp_dir / "shared.db")

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    return config_path


@pytest.fixture
def store_path(tmp_dir):
    """Provide a temporary shared store path."""
    return tmp_dir / "shared.db"
