"""Detection of support directories left behind by uninstalled applications."""

import logging
import plistlib
import re
import shutil
from pathlib import Path
from typing import Optional

from osoptimize.bounded_scanner import list_children
from osoptimize.models import InstalledApp, OrphanedApplication, RunConfig
from osoptimize.platforms import Platform
from osoptimize.scanner import get_directory_size

logger = logging.getLogger(__name__)

APPLICATIONS_DIR = Path("/Applications")
APP_SUPPORT_DIR = "~/Library/Application Support"
PREFERENCES_DIR = "~/Library/Preferences"
LINUX_CONFIG_DIR = "~/.config"
LINUX_BIN_DIRS = (Path("/usr/bin"), Path("/usr/local/bin"))
LINUX_OPT_DIR = Path("/opt")

# Vendors whose support directories are always treated as installed
ALWAYS_INSTALLED_PREFIXES = ("com.apple", "Apple", "Microsoft", "Google", "Adobe")

# Three or more lowercase segments; vendor-generated segments may start with a digit
BUNDLE_ID_PATTERN = re.compile(r"^[a-z][a-z0-9-]*\.[a-z][a-z0-9-]*\.[a-z0-9]")

# Shortest shared lead of a vendor-generated final segment (com.todesktop.230313...)
_MIN_SUFFIX_LEAD = 3


def is_bundle_identifier(name: str) -> bool:
    """Whether a directory name looks like a reverse-DNS bundle identifier."""
    return BUNDLE_ID_PATTERN.match(name) is not None


def is_always_installed(name: str) -> bool:
    """Whether a support directory belongs to an allowlisted vendor."""
    return name.startswith(ALWAYS_INSTALLED_PREFIXES)


# =============================================================================
# Inventory
# =============================================================================


def read_bundle_id(app_path: Path) -> Optional[str]:
    """Read CFBundleIdentifier from an app bundle's Info.plist."""
    info = app_path / "Contents" / "Info.plist"
    try:
        with info.open("rb") as f:
            data = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError) as e:
        logger.debug("Unreadable Info.plist in %s: %s", app_path, e)
        return None
    bundle_id = data.get("CFBundleIdentifier") if isinstance(data, dict) else None
    return bundle_id if isinstance(bundle_id, str) and bundle_id else None


def list_installed_apps(
    applications_dir: Path = APPLICATIONS_DIR,
    max_depth: int = 2,
) -> list[InstalledApp]:
    """
    Enumerate .app bundles under the applications directory.

    Args:
        applications_dir: Directory to search (/Applications)
        max_depth: Deepest bundle level (2 covers vendor subfolders)

    Returns:
        Installed apps with display name and bundle ID when readable
    """
    apps: list[InstalledApp] = []
    if not applications_dir.is_dir():
        return apps

    pending: list[tuple[Path, int]] = [(applications_dir, 1)]
    while pending:
        directory, depth = pending.pop()
        for child in list_children(directory):
            if child.is_symlink() or not child.is_dir():
                continue
            if child.suffix == ".app":
                apps.append(
                    InstalledApp(name=child.stem, bundle_id=read_bundle_id(child), path=child)
                )
            elif depth < max_depth:
                pending.append((child, depth + 1))

    apps.sort(key=lambda a: a.name.lower())
    return apps


def is_linux_app_installed(
    name: str,
    bin_dirs: tuple[Path, ...] = LINUX_BIN_DIRS,
    opt_dir: Path = LINUX_OPT_DIR,
) -> bool:
    """Whether an executable or /opt install exists for a ~/.config entry."""
    if shutil.which(name) is not None:
        return True
    if any((d / name).is_file() for d in bin_dirs):
        return True
    return (opt_dir / name).is_dir()


# =============================================================================
# Matching
# =============================================================================


def _shares_vendor_prefix(candidate: str, installed_id: str) -> bool:
    """Prefix match, tolerant of vendor-generated final segments.

    com.todesktop.230313abc123 and com.todesktop.230313mzl4w4u92 agree on every
    segment but the last, and the last segments share a common lead.
    """
    if candidate.startswith(installed_id) or installed_id.startswith(candidate):
        return True

    cand_parts = candidate.split(".")
    inst_parts = installed_id.split(".")
    if len(cand_parts) != len(inst_parts) or cand_parts[:-1] != inst_parts[:-1]:
        return False

    lead = 0
    for a, b in zip(cand_parts[-1], inst_parts[-1]):
        if a != b:
            break
        lead += 1
    return lead >= _MIN_SUFFIX_LEAD


def _significant_segments(bundle_id: str) -> list[str]:
    return [
        part
        for part in bundle_id.split(".")
        if part != "com" and not part.isdigit() and len(part) >= 3
    ]


def _names_overlap(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def match_installed_app(name: str, installed: list[InstalledApp]) -> Optional[str]:
    """
    Find the installed app that claims a support directory.

    Matching is lenient: an installed app wrongly claiming a directory only
    hides a cleanup opportunity, the reverse would delete live settings.

    Args:
        name: Support directory name (bundle ID or plain app name)
        installed: Inventory from list_installed_apps

    Returns:
        Name of the matching app, or None when the directory is orphaned
    """
    if is_bundle_identifier(name):
        for app in installed:
            if app.bundle_id == name:
                return app.name
        for app in installed:
            if app.bundle_id and _shares_vendor_prefix(name, app.bundle_id):
                return app.name
        for segment in _significant_segments(name):
            for app in installed:
                if _names_overlap(segment, app.name):
                    return app.name
        return None

    for app in installed:
        if _names_overlap(name, app.name):
            return app.name
    return None


# =============================================================================
# Detection
# =============================================================================


def _find_macos_orphans(
    support_dir: Path,
    applications_dir: Path,
    applications_depth: int,
) -> list[OrphanedApplication]:
    if not support_dir.is_dir():
        return []

    installed = list_installed_apps(applications_dir, applications_depth)
    logger.debug("Found %d installed applications", len(installed))

    orphans = []
    for directory in list_children(support_dir):
        if directory.is_symlink() or not directory.is_dir():
            continue
        name = directory.name
        if is_always_installed(name):
            continue

        match = match_installed_app(name, installed)
        if match is not None:
            logger.debug("%s belongs to %s", name, match)
            continue

        orphans.append(
            OrphanedApplication(
                directory_path=directory,
                app_identifier=name,
                is_bundle_id=is_bundle_identifier(name),
                size_bytes=get_directory_size(directory),
            )
        )
    return orphans


def _find_linux_orphans(
    config_dir: Path,
    bin_dirs: tuple[Path, ...],
    opt_dir: Path,
) -> list[OrphanedApplication]:
    orphans = []
    for directory in list_children(config_dir):
        if directory.is_symlink() or not directory.is_dir():
            continue
        if is_linux_app_installed(directory.name, bin_dirs, opt_dir):
            continue
        orphans.append(
            OrphanedApplication(
                directory_path=directory,
                app_identifier=directory.name,
                size_bytes=get_directory_size(directory),
            )
        )
    return orphans


def find_orphaned_apps(
    config: RunConfig | None = None,
    *,
    support_dir: Path | None = None,
    applications_dir: Path = APPLICATIONS_DIR,
    bin_dirs: tuple[Path, ...] = LINUX_BIN_DIRS,
    opt_dir: Path = LINUX_OPT_DIR,
) -> list[OrphanedApplication]:
    """
    Find support/config directories whose application is no longer installed.

    macOS cross-references ~/Library/Application Support with the bundles in
    /Applications; Linux checks each ~/.config entry for a same-named
    executable.

    Args:
        config: Run configuration (platform and limits)
        support_dir: Override for the directory holding per-app settings
        applications_dir: Override for /Applications (macOS)
        bin_dirs: Extra binary directories checked on Linux
        opt_dir: Directory of self-contained installs on Linux

    Returns:
        Orphaned directories with their aggregate sizes
    """
    config = config or RunConfig()

    if config.platform == Platform.MACOS:
        root = support_dir or Path(APP_SUPPORT_DIR).expanduser()
        orphans = _find_macos_orphans(root, applications_dir, config.limits.applications_depth)
    else:
        root = support_dir or Path(LINUX_CONFIG_DIR).expanduser()
        orphans = _find_linux_orphans(root, bin_dirs, opt_dir)

    logger.info("Found %d orphaned application directories in %s", len(orphans), root)
    return orphans


def find_preference_files(app_identifier: str, preferences_dir: Path | None = None) -> list[Path]:
    """
    Find Preferences plists belonging to an orphaned application.

    Bundle IDs match '<id>.plist' exactly; plain names match any plist
    containing the name.
    """
    preferences_dir = preferences_dir or Path(PREFERENCES_DIR).expanduser()
    if not preferences_dir.is_dir():
        return []
    if app_identifier.startswith("com."):
        pattern = f"{app_identifier}.plist"
    else:
        pattern = f"*{app_identifier}*.plist"
    return sorted(p for p in preferences_dir.glob(pattern) if p.is_file())
