"""Platform detection for os-optimize."""

import sys
from enum import Enum


class Platform(str, Enum):
    """Operating system family the cleanup categories are derived from."""

    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"


def current_platform() -> Platform:
    """Detect the platform of the running interpreter."""
    if sys.platform == "darwin":
        return Platform.MACOS
    if sys.platform.startswith("linux"):
        return Platform.LINUX
    return Platform.OTHER


def is_macos() -> bool:
    """Check if running on macOS."""
    return current_platform() == Platform.MACOS


def is_linux() -> bool:
    """Check if running on Linux."""
    return current_platform() == Platform.LINUX
