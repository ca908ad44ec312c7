"""Shared fixtures."""

from pathlib import Path

import pytest

from osoptimize.models import RunConfig
from osoptimize.platforms import Platform


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """Point HOME at an empty temporary directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("FORCE_MODE", raising=False)
    monkeypatch.delenv("DRY_RUN", raising=False)
    return home_dir


@pytest.fixture
def linux_config() -> RunConfig:
    return RunConfig(platform=Platform.LINUX)
