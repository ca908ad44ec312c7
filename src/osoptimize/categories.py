"""Cleanup category definitions for os-optimize."""

from pathlib import Path

from osoptimize.models import Category, CategoryKind, RunConfig
from osoptimize.platforms import Platform

MACOS = Platform.MACOS
LINUX = Platform.LINUX
OTHER = Platform.OTHER

# Ordering matters: reports list categories in this order.
# 'downloads' is deliberately absent - it may hold irreplaceable user files.
CATEGORIES: dict[str, Category] = {
    # =============================================================================
    # SINGLE-PATH CATEGORIES - one root directory per platform
    # =============================================================================
    "caches": Category(
        id="caches",
        name="Application Caches",
        paths={MACOS: "~/Library/Caches", LINUX: "~/.cache", OTHER: "~/.cache"},
        description="Per-user application cache files",
        consequences="Apps re-create caches on next launch",
    ),
    "logs": Category(
        id="logs",
        name="Logs",
        paths={MACOS: "~/Library/Logs", LINUX: "/var/log", OTHER: "/var/log"},
        description="Application and system log files",
        consequences="Historical logs become unavailable for debugging",
    ),
    "temp": Category(
        id="temp",
        name="Temporary Files",
        paths={MACOS: "/tmp", LINUX: "/tmp", OTHER: "/tmp"},
        description="Files left behind in the system temp directory",
        consequences="Running programs may lose scratch data",
    ),
    "browser_trash": Category(
        id="browser_trash",
        name="Trash",
        paths={MACOS: "~/.Trash", LINUX: "~/.local/share/Trash"},
        description="Files in the Trash",
        consequences="Deleted files cannot be recovered",
    ),
    "xcode": Category(
        id="xcode",
        name="Xcode DerivedData",
        paths={MACOS: "~/Library/Developer/Xcode/DerivedData"},
        description="Xcode build products and indexes",
        consequences="Next Xcode build is a full rebuild",
    ),
    "apt": Category(
        id="apt",
        name="APT Package Cache",
        paths={LINUX: "/var/cache/apt/archives"},
        description="Downloaded .deb packages",
        consequences="Packages re-download on next install",
    ),
    "yum": Category(
        id="yum",
        name="YUM Package Cache",
        paths={LINUX: "/var/cache/yum"},
        description="Downloaded RPM packages and metadata",
        consequences="Metadata and packages re-download on next install",
    ),
    "pacman": Category(
        id="pacman",
        name="Pacman Package Cache",
        paths={LINUX: "/var/cache/pacman/pkg"},
        description="Downloaded pacman packages",
        consequences="Downgrades need the packages to be fetched again",
    ),
    "node_modules": Category(
        id="node_modules",
        name="node_modules",
        kind=CategoryKind.MULTI_PATH_SPECIAL,
        display_path="Multiple project directories",
        dir_patterns=["node_modules"],
        search_roots=["~/dev", "~/projects", "~/workspace", "~/code", "~/Documents", "~/Desktop"],
        description="Installed JavaScript dependencies in project directories",
        consequences="Restore with npm install, yarn install or pnpm install",
    ),
    "docker": Category(
        id="docker",
        name="Docker Desktop Logs",
        paths={
            MACOS: "~/Library/Containers/com.docker.docker/Data/log",
            LINUX: "~/.docker/desktop/log",
        },
        description="Docker Desktop diagnostic logs",
        consequences="Docker Desktop diagnostics lose history",
    ),
    "volumes": Category(
        id="volumes",
        name="Docker Volumes",
        kind=CategoryKind.MULTI_PATH_SPECIAL,
        display_path="Docker volumes",
        description="Docker volumes not used by any container",
        consequences="Data stored in unused volumes is lost",
    ),
    "build_artifacts": Category(
        id="build_artifacts",
        name="Build Artifacts",
        kind=CategoryKind.MULTI_PATH_SPECIAL,
        display_path="Multiple project directories",
        dir_patterns=[
            "dist",
            "build",
            "target",
            ".next",
            ".turbo",
            ".parcel-cache",
            "out",
            ".output",
            ".nuxt",
            ".vuepress/dist",
            ".cache",
            "coverage",
            ".nyc_output",
        ],
        search_roots=["~/dev", "~/projects", "~/workspace", "~/code"],
        description="Compiled output and tool caches in project directories",
        consequences="Projects must be rebuilt",
    ),
    "snap": Category(
        id="snap",
        name="Snap Cache",
        paths={LINUX: "/var/lib/snapd/cache"},
        description="Cached snap package downloads",
        consequences="Snaps re-download on next refresh",
    ),
    "orphaned_apps": Category(
        id="orphaned_apps",
        name="Orphaned Applications",
        kind=CategoryKind.MULTI_PATH_SPECIAL,
        display_path="Application Support & Preferences",
        description="Settings left behind by applications that were removed",
        consequences="Reinstalling the application starts from default settings",
    ),
}

# Per-platform category order
_PLATFORM_ORDER: dict[Platform, tuple[str, ...]] = {
    MACOS: (
        "caches",
        "logs",
        "temp",
        "browser_trash",
        "xcode",
        "node_modules",
        "docker",
        "volumes",
        "build_artifacts",
        "orphaned_apps",
    ),
    LINUX: (
        "caches",
        "logs",
        "temp",
        "browser_trash",
        "apt",
        "yum",
        "pacman",
        "node_modules",
        "docker",
        "volumes",
        "build_artifacts",
        "snap",
        "orphaned_apps",
    ),
    OTHER: ("caches", "logs", "temp"),
}


def get_category(category_id: str) -> Category | None:
    """Get a category by ID."""
    return CATEGORIES.get(category_id)


def categories_for(platform: Platform) -> list[str]:
    """Get the ordered category names offered on a platform."""
    return list(_PLATFORM_ORDER.get(platform, _PLATFORM_ORDER[OTHER]))


def get_cleanup_categories(config: RunConfig | None = None) -> list[str]:
    """Get the cleanup categories for the configured (or current) platform."""
    config = config or RunConfig()
    return categories_for(config.platform)


def root_path_for(category_id: str, platform: Platform) -> Path | None:
    """
    Resolve the root directory of a single-path category.

    Args:
        category_id: Category ID
        platform: Platform to resolve for

    Returns:
        Expanded root path, or None for special and unknown categories
    """
    category = get_category(category_id)
    if category is None or category.is_special:
        return None

    path = category.paths.get(platform)
    if path is None:
        return None
    return Path(path).expanduser()


def get_category_path(category_id: str, config: RunConfig | None = None) -> Path | None:
    """
    Resolve a category root, honouring configured overrides.

    Args:
        category_id: Category ID
        config: Run configuration (overrides in config.category_paths win)

    Returns:
        Root path, or None when the category has no single root
    """
    config = config or RunConfig()
    override = config.category_paths.get(category_id)
    if override:
        return Path(override).expanduser()
    return root_path_for(category_id, config.platform)
