"""Tests for configuration loading."""

import json

import pytest

from osoptimize.config import env_flag, load_config_file, load_run_config, parse_flag
from osoptimize.platforms import Platform


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("FORCE_MODE", raising=False)
    monkeypatch.delenv("DRY_RUN", raising=False)
    return tmp_path / "config.json"


class TestConfigFile:
    def test_missing_file(self, config_file):
        assert load_config_file(config_file) == {}

    def test_corrupt_file(self, config_file):
        config_file.write_text("{not json")
        assert load_config_file(config_file) == {}

    def test_non_object(self, config_file):
        config_file.write_text("[1, 2]")
        assert load_config_file(config_file) == {}


class TestEnvFlag:
    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes"])
    def test_truthy(self, monkeypatch, value):
        monkeypatch.setenv("FORCE_MODE", value)
        assert env_flag("FORCE_MODE") is True

    def test_false(self, monkeypatch):
        monkeypatch.setenv("FORCE_MODE", "false")
        assert env_flag("FORCE_MODE") is False

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("FORCE_MODE", raising=False)
        assert env_flag("FORCE_MODE") is None

    def test_parse_flag(self):
        assert parse_flag(True) is True
        assert parse_flag("false") is False
        assert parse_flag(1) is None
        assert parse_flag(None) is None


class TestLoadRunConfig:
    def test_defaults(self, config_file):
        config = load_run_config(config_file=config_file)
        assert config.force is False
        assert config.dry_run is False
        assert config.limits.preview_files_per_dir == 50

    def test_file_values(self, config_file):
        config_file.write_text(
            json.dumps(
                {
                    "force": True,
                    "limits": {"preview_files_per_dir": 10},
                    "category_paths": {"caches": "/srv/cache"},
                }
            )
        )
        config = load_run_config(config_file=config_file)
        assert config.force is True
        assert config.limits.preview_files_per_dir == 10
        assert config.limits.build_preview_total == 500
        assert config.category_paths == {"caches": "/srv/cache"}

    def test_string_flag_in_file(self, config_file):
        config_file.write_text(json.dumps({"force": "false", "dry_run": "true"}))
        config = load_run_config(config_file=config_file)
        assert config.force is False
        assert config.dry_run is True

    def test_non_boolean_flag_in_file_ignored(self, config_file):
        config_file.write_text(json.dumps({"force": 1}))
        assert load_run_config(config_file=config_file).force is False

    def test_env_overrides_file(self, config_file, monkeypatch):
        config_file.write_text(json.dumps({"force": True}))
        monkeypatch.setenv("FORCE_MODE", "false")
        assert load_run_config(config_file=config_file).force is False

    def test_flag_overrides_env(self, config_file, monkeypatch):
        monkeypatch.setenv("FORCE_MODE", "true")
        monkeypatch.setenv("DRY_RUN", "true")
        config = load_run_config(force=False, dry_run=False, config_file=config_file)
        assert config.force is False
        assert config.dry_run is False

    def test_dry_run_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("DRY_RUN", "true")
        assert load_run_config(config_file=config_file).dry_run is True

    def test_invalid_limits_ignored(self, config_file):
        config_file.write_text(json.dumps({"limits": {"preview_files_per_dir": -5}}))
        config = load_run_config(config_file=config_file)
        assert config.limits.preview_files_per_dir == 50

    def test_platform_and_age(self, config_file):
        config = load_run_config(min_age_days=14, platform=Platform.MACOS, config_file=config_file)
        assert config.min_age_days == 14
        assert config.platform == Platform.MACOS
