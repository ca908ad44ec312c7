"""os-optimize - interactive disk cleanup for macOS and Linux."""

__version__ = "1.0.0"
