"""Configuration loading for os-optimize."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from osoptimize.models import RunConfig, ScanLimits
from osoptimize.platforms import Platform

logger = logging.getLogger(__name__)

CONFIG_DIR = Path("~/.os-optimize").expanduser()
CONFIG_FILE = CONFIG_DIR / "config.json"

_TRUTHY = {"1", "true", "yes", "on"}


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load the JSON config file, or an empty dict if missing or corrupt."""
    path = path or CONFIG_FILE
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return data


def parse_flag(value: Any) -> bool | None:
    """Interpret a boolean or true/false string; None for anything else."""
    if isinstance(value, bool):
        return value
    if not isinstance(value, str) or value.strip() == "":
        return None
    return value.strip().lower() in _TRUTHY


def env_flag(name: str) -> bool | None:
    """Read a true/false environment variable; None when unset or empty."""
    return parse_flag(os.environ.get(name))


def _file_flag(data: dict[str, Any], key: str) -> bool:
    if key not in data:
        return False
    value = parse_flag(data[key])
    if value is None:
        logger.warning("Ignoring config %r: expected true or false", key)
        return False
    return value


def _limits_from(data: dict[str, Any]) -> ScanLimits:
    overrides = data.get("limits") or {}
    if not isinstance(overrides, dict):
        logger.warning("Ignoring config 'limits': expected an object")
        return ScanLimits()
    try:
        return ScanLimits(**overrides)
    except ValidationError as e:
        logger.warning("Ignoring invalid config 'limits': %s", e)
        return ScanLimits()


def load_run_config(
    force: bool | None = None,
    dry_run: bool | None = None,
    min_age_days: int = 0,
    platform: Platform | None = None,
    config_file: Path | None = None,
) -> RunConfig:
    """
    Build the run configuration.

    Precedence is explicit arguments, then FORCE_MODE / DRY_RUN from the
    environment, then the config file, then defaults.

    Args:
        force: --force flag (None when not given)
        dry_run: --dry-run flag (None when not given)
        min_age_days: Age filter in days
        platform: Platform override (detected when None)
        config_file: Alternate config file

    Returns:
        RunConfig for this invocation
    """
    data = load_config_file(config_file)

    if force is None:
        force = env_flag("FORCE_MODE")
    if force is None:
        force = _file_flag(data, "force")

    if dry_run is None:
        dry_run = env_flag("DRY_RUN")
    if dry_run is None:
        dry_run = _file_flag(data, "dry_run")

    category_paths = data.get("category_paths") or {}
    if not isinstance(category_paths, dict):
        logger.warning("Ignoring config 'category_paths': expected an object")
        category_paths = {}

    fields: dict[str, Any] = {
        "force": force,
        "dry_run": dry_run,
        "min_age_days": max(0, min_age_days),
        "limits": _limits_from(data),
        "category_paths": {str(k): str(v) for k, v in category_paths.items()},
    }
    if platform is not None:
        fields["platform"] = platform
    return RunConfig(**fields)
