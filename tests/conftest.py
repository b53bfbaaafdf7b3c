"""Shared fixtures for multiplier tests."""

import io
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from intmul.config import Config, defaults
from intmul.core import ThreadSpawner


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep INTMUL_* variables and stray config files out of every test."""
    for name in (defaults.ENV_CONFIG_FILE, defaults.ENV_BACKEND,
                 defaults.ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(defaults, 'USER_CONFIG_DIR', tmp_path / 'home_config')
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def errstream():
    """Captures diagnostics written by units."""
    return io.StringIO()


@pytest.fixture
def thread_spawner(errstream):
    return ThreadSpawner(errstream=errstream)


@pytest.fixture
def thread_config():
    config = Config()
    config.set('workers.backend', 'thread')
    return config


def hex_product(a: str, b: str) -> int:
    """Reference product computed with Python integers."""
    return int(a, 16) * int(b, 16)
