"""Tests for platform detection."""

from unittest.mock import patch

from osoptimize.platforms import Platform, current_platform, is_linux, is_macos


class TestCurrentPlatform:
    def test_darwin(self):
        with patch("osoptimize.platforms.sys.platform", "darwin"):
            assert current_platform() == Platform.MACOS
            assert is_macos() is True
            assert is_linux() is False

    def test_linux(self):
        with patch("osoptimize.platforms.sys.platform", "linux"):
            assert current_platform() == Platform.LINUX
            assert is_linux() is True

    def test_other(self):
        with patch("osoptimize.platforms.sys.platform", "win32"):
            assert current_platform() == Platform.OTHER
