"""Path classification for cleanup safety.

Both predicates are purely lexical: they run once per candidate in large
scans and never touch the filesystem.
"""

from pathlib import PurePath

# Tool and version-control metadata directories that are never deleted
PROTECTED_DIRS = frozenset({".git", ".claude", ".cursor", ".task-flow"})

# Directory names that mark development artifacts (deletable, but warned about)
DEV_DIR_NAMES = frozenset(
    {
        "node_modules",
        "__pycache__",
        ".pytest_cache",
        ".next",
        "dist",
        "build",
        "target",
        ".gradle",
        ".mvn",
        ".venv",
        "venv",
        ".cache",
        "coverage",
        ".nyc_output",
        ".turbo",
        ".parcel-cache",
    }
)

DEV_EXTENSIONS = frozenset({".map", ".tsbuildinfo"})

# Consecutive path segments of platform log directories
_LOG_DIR_SEGMENTS = (("Library", "Logs"), ("var", "log"))
_CACHES_SEGMENTS = ("Library", "Caches")


def _contains_sequence(parts: tuple[str, ...], sequence: tuple[str, ...]) -> bool:
    """Check whether `sequence` appears as consecutive items of `parts`."""
    width = len(sequence)
    return any(parts[i : i + width] == sequence for i in range(len(parts) - width + 1))


def is_protected_name(name: str) -> bool:
    """Check if a single directory name is protected."""
    return name in PROTECTED_DIRS


def should_exclude_file(path: str | PurePath) -> bool:
    """
    Check if a path must be excluded from cleanup.

    Protects anything inside (or equal to) a protected directory, matched as
    a whole path segment, and Finder's .DS_Store files outside Library/Caches.

    Args:
        path: Path to check

    Returns:
        True if the path must never be deleted
    """
    path_str = str(path)
    if not path_str:
        return True

    parts = PurePath(path_str).parts
    if any(part in PROTECTED_DIRS for part in parts):
        return True

    if parts[-1] == ".DS_Store":
        return not _contains_sequence(parts[:-1], _CACHES_SEGMENTS)

    return False


def is_dev_file(path: str | PurePath) -> bool:
    """
    Check if a path looks like a development artifact.

    Only used to trigger an extra confirmation; never blocks deletion.

    Args:
        path: Path to check

    Returns:
        True for files under dev directories, source maps, tsbuildinfo and
        .log files outside the platform log directories
    """
    path_str = str(path)
    if not path_str:
        return False

    pure = PurePath(path_str)
    parents = pure.parts[:-1]
    if any(part in DEV_DIR_NAMES for part in parents):
        return True

    if pure.suffix in DEV_EXTENSIONS:
        return True

    if pure.suffix == ".log":
        return not any(_contains_sequence(parents, seq) for seq in _LOG_DIR_SEGMENTS)

    return False
