"""Tests for CLI interface."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from osoptimize import __version__
from osoptimize.cli import app
from osoptimize.models import OrphanedApplication, ScanResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, home, monkeypatch):
    """Keep logs and config inside the test directory."""
    monkeypatch.setattr("osoptimize.cli.LOG_DIR", tmp_path / "logs")
    config_file = tmp_path / "config.json"
    monkeypatch.setattr("osoptimize.config.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def cache_dir(tmp_path, isolated):
    """A caches root with one file, wired in through the config file."""
    cache = tmp_path / "cache"
    cache.mkdir()
    (cache / "blob.bin").write_text("data")
    isolated.write_text(json.dumps({"category_paths": {"caches": str(cache)}}))
    return cache


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "os-optimize version" in result.stdout


class TestHelp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "clean" in result.stdout
        assert "preview" in result.stdout

    def test_clean_help(self):
        result = runner.invoke(app, ["clean", "--help"])
        assert result.exit_code == 0
        assert "--dry-run" in result.stdout


class TestCategories:
    def test_lists_categories(self):
        result = runner.invoke(app, ["categories"])
        assert result.exit_code == 0
        assert "caches" in result.stdout


class TestPreview:
    def test_prints_total(self):
        fake = ScanResult(category_name="caches", display_path="/c", item_count=2, total_bytes=10)
        with patch("osoptimize.preview.scan_cleanup_category", return_value=fake):
            result = runner.invoke(app, ["preview", "--min-age", "3"])
        assert result.exit_code == 0
        assert "TOTAL" in result.stdout

    def test_negative_age_rejected(self):
        result = runner.invoke(app, ["preview", "--min-age", "-1"])
        assert result.exit_code != 0


class TestClean:
    def test_invalid_category(self):
        result = runner.invoke(app, ["clean", "nonexistent"])
        assert result.exit_code == 1
        assert "Unknown category" in result.stdout

    def test_requires_category(self):
        result = runner.invoke(app, ["clean"])
        assert result.exit_code != 0

    def test_dry_run(self, cache_dir):
        with patch("osoptimize.cli.confirm_action", side_effect=AssertionError("prompted")):
            result = runner.invoke(app, ["clean", "caches", "--dry-run"])
        assert result.exit_code == 0
        assert "would delete 1 items" in result.stdout
        assert (cache_dir / "blob.bin").exists()

    def test_declined(self, cache_dir):
        with patch("osoptimize.cli.confirm_action", return_value=False):
            result = runner.invoke(app, ["clean", "caches"])
        assert result.exit_code == 1
        assert "cancelled" in result.stdout
        assert (cache_dir / "blob.bin").exists()

    def test_confirmed(self, cache_dir):
        with patch("osoptimize.cli.confirm_action", return_value=True):
            result = runner.invoke(app, ["clean", "caches"])
        assert result.exit_code == 0
        assert "1 deleted, 0 failed" in result.stdout
        assert not (cache_dir / "blob.bin").exists()

    def test_force_flag(self, cache_dir):
        with patch("osoptimize.cli.confirm_action", return_value=False) as mock_confirm:
            result = runner.invoke(app, ["clean", "caches", "-y"])
        assert result.exit_code == 0
        mock_confirm.assert_not_called()

    def test_force_mode_env(self, cache_dir, monkeypatch):
        monkeypatch.setenv("FORCE_MODE", "true")
        with patch("osoptimize.cli.confirm_action", return_value=False) as mock_confirm:
            result = runner.invoke(app, ["clean", "caches"])
        assert result.exit_code == 0
        mock_confirm.assert_not_called()


class TestOrphans:
    def test_none_found(self):
        with patch("osoptimize.cli.find_orphaned_apps", return_value=[]):
            result = runner.invoke(app, ["orphans"])
        assert result.exit_code == 0
        assert "No orphaned" in result.stdout

    def test_lists_orphans(self, tmp_path):
        orphan = OrphanedApplication(
            directory_path=tmp_path / "OldEditor", app_identifier="OldEditor", size_bytes=2048
        )
        with patch("osoptimize.cli.find_orphaned_apps", return_value=[orphan]):
            result = runner.invoke(app, ["orphans"])
        assert result.exit_code == 0
        assert "OldEditor" in result.stdout
