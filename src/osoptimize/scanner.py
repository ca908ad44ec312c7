"""Category scanning for os-optimize."""

import logging
import os
import subprocess
from pathlib import Path, PurePath

from osoptimize.bounded_scanner import (
    FilePredicate,
    ScanCaps,
    all_of,
    find_directories,
    not_excluded,
    older_than,
    walk_files,
)
from osoptimize.categories import get_category, get_category_path
from osoptimize.models import Category, DeletionCandidate, RunConfig, ScanResult
from osoptimize.process import command_exists, run_command

logger = logging.getLogger(__name__)


def expand_path(path: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(path)))


# =============================================================================
# Size measurement
# =============================================================================


def walk_size(path: Path, max_depth: int = 64) -> int:
    """Bytes held by regular files under `path`, skipping unreadable entries."""
    total = 0
    pending = [(path, 0)]
    while pending:
        directory, depth = pending.pop()
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False) and depth < max_depth:
                            pending.append((Path(entry.path), depth + 1))
                    except OSError:
                        continue
        except OSError as e:
            logger.debug("Cannot read %s: %s", directory, e)
    return total


def du_size(path: Path, timeout: float = 60.0) -> int | None:
    """
    Ask `du` for the aggregate size of a path.

    Returns:
        Size in bytes, or None when du is missing, fails or times out
    """
    if not command_exists("du"):
        return None
    try:
        result = run_command(["du", "-sk", str(path)], timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("du failed for %s: %s", path, e)
        return None

    # du exits non-zero on partially unreadable trees but still prints a total
    first = result.stdout.strip().split("\t", 1)[0] if result.stdout else ""
    if not first.isdigit():
        return None
    return int(first) * 1024


def get_directory_size(path: Path) -> int:
    """
    Aggregate size of a directory tree.

    Uses du when available and falls back to walking the tree. Never cached:
    every call measures the live filesystem.
    """
    if not path.exists():
        return 0
    size = du_size(path)
    if size is not None:
        return size
    return walk_size(path)


def file_size(path: Path) -> int:
    """Size of a single file without following symlinks (0 if unreadable)."""
    try:
        return path.lstat().st_size
    except OSError:
        return 0


def _estimate_count(total_bytes: int, avg_file_bytes: int) -> int:
    if total_bytes <= 0:
        return 0
    return max(1, total_bytes // avg_file_bytes)


def _age_predicate(min_age_days: int) -> FilePredicate | None:
    return older_than(min_age_days) if min_age_days > 0 else None


def existing_search_roots(category: Category) -> list[Path]:
    """Search roots of a category that exist on this machine."""
    roots = [expand_path(r) for r in category.search_roots]
    return [r for r in roots if r.is_dir()]


# =============================================================================
# Single-path categories
# =============================================================================


def collect_files(root: Path, config: RunConfig) -> list[DeletionCandidate]:
    """
    List deletable files under a category root.

    Protected paths and files younger than config.min_age_days are left out
    during the walk.

    Args:
        root: Category root directory
        config: Run configuration (age filter and limits)

    Returns:
        One DeletionCandidate per file, with its size
    """
    limits = config.limits
    caps = ScanCaps(
        max_depth=limits.single_path_max_depth,
        max_results=limits.single_path_max_results,
        time_budget=limits.time_budget_seconds,
    )
    predicate = all_of(not_excluded, _age_predicate(config.min_age_days))
    return [
        DeletionCandidate(path=path, is_directory=False, size_bytes=file_size(path))
        for path in walk_files(root, predicate, caps)
    ]


def _scan_single_path(category_id: str, config: RunConfig) -> ScanResult:
    root = get_category_path(category_id, config)
    if root is None or not root.exists():
        logger.debug("Category %s: path not found (%s)", category_id, root)
        return ScanResult(category_name=category_id, display_path=str(root or ""))

    logger.info("Scanning category: %s (%s)", category_id, root)
    files = collect_files(root, config)
    total = sum(f.size_bytes for f in files)

    # Size metadata can be unavailable (e.g. restricted caches); approximate
    if total == 0 and files:
        total = get_directory_size(root)

    return ScanResult(
        category_name=category_id,
        display_path=str(root),
        item_count=len(files),
        total_bytes=total,
    )


# =============================================================================
# node_modules
# =============================================================================


def find_node_modules_dirs(config: RunConfig, complete: bool = False) -> list[Path]:
    """
    Find node_modules directories under the project search roots.

    Args:
        config: Run configuration
        complete: If True, return every match (used for deletion); otherwise
            cap matches per search root

    Returns:
        Paths to node_modules directories, protected trees pruned
    """
    category = get_category("node_modules")
    limits = config.limits
    caps = ScanCaps(
        max_depth=limits.node_modules_search_depth,
        max_dirs_sampled=None if complete else limits.node_modules_dirs_per_root,
        time_budget=None if complete else limits.time_budget_seconds,
    )

    found: list[Path] = []
    seen: set[Path] = set()
    for root in existing_search_roots(category):
        for directory in find_directories(root, "node_modules", caps):
            if directory in seen:
                continue
            seen.add(directory)
            found.append(directory)
    return found


def scan_node_modules(config: RunConfig) -> list[Path]:
    """
    Sample files inside node_modules directories.

    Only an order-of-magnitude estimate is needed, so at most a few files per
    directory are listed (more when an age filter is active).

    Args:
        config: Run configuration

    Returns:
        Sampled file paths
    """
    limits = config.limits
    aged = config.min_age_days > 0
    per_dir = limits.aged_files_per_dir if aged else limits.preview_files_per_dir
    predicate = all_of(not_excluded, _age_predicate(config.min_age_days))

    logger.info("Scanning for node_modules directories (sampled)...")
    files: list[Path] = []
    for directory in find_node_modules_dirs(config):
        remaining = limits.node_modules_sample_total - len(files)
        if remaining <= 0:
            break
        caps = ScanCaps(
            max_depth=limits.node_modules_sample_depth,
            max_results=min(per_dir, remaining),
            time_budget=limits.time_budget_seconds,
        )
        files.extend(walk_files(directory, predicate, caps))
    return files


def _scan_node_modules_category(config: RunConfig) -> ScanResult:
    category = get_category("node_modules")

    if config.min_age_days > 0:
        sample = scan_node_modules(config)
        return ScanResult(
            category_name=category.id,
            display_path=category.display_path,
            item_count=len(sample),
            total_bytes=sum(file_size(p) for p in sample),
        )

    total = sum(get_directory_size(d) for d in find_node_modules_dirs(config))
    if total == 0:
        total = sum(file_size(p) for p in scan_node_modules(config))

    return ScanResult(
        category_name=category.id,
        display_path=category.display_path,
        item_count=_estimate_count(total, config.limits.node_modules_avg_file_bytes),
        total_bytes=total,
        is_estimate=True,
    )


# =============================================================================
# Build artifacts
# =============================================================================


def _pattern_parts(pattern: str) -> tuple[str, ...]:
    return tuple(part for part in pattern.split("/") if part)


def _matching_pattern(
    parents: tuple[str, ...],
    patterns: list[tuple[str, ...]],
) -> tuple[str, ...] | None:
    for parts in patterns:
        width = len(parts)
        for i in range(len(parents) - width + 1):
            if parents[i : i + width] == parts:
                return parts
    return None


def find_build_artifact_dirs(config: RunConfig) -> list[Path]:
    """
    Find build output directories under the project search roots.

    Nested matches (a 'build' inside a 'dist') are reported once, through the
    outermost directory.
    """
    category = get_category("build_artifacts")
    limits = config.limits

    found: list[Path] = []
    for root in existing_search_roots(category):
        for pattern in category.dir_patterns:
            parts = _pattern_parts(pattern)
            caps = ScanCaps(
                max_depth=limits.build_artifact_depth,
                max_dirs_sampled=limits.build_dirs_per_pattern,
                time_budget=limits.time_budget_seconds,
            )
            for directory in find_directories(root, parts[0], caps):
                target = directory.joinpath(*parts[1:])
                if len(parts) > 1 and not target.is_dir():
                    continue
                found.append(target)

    outermost: list[Path] = []
    for directory in sorted(set(found), key=lambda p: len(p.parts)):
        if not any(parent in directory.parents for parent in outermost):
            outermost.append(directory)
    return outermost


def scan_build_artifacts(config: RunConfig, for_deletion: bool = False) -> list[Path]:
    """
    List individual files inside build output directories.

    Args:
        config: Run configuration
        for_deletion: Use the larger deletion caps instead of preview sampling

    Returns:
        File paths, protected trees pruned and excluded paths filtered out
    """
    category = get_category("build_artifacts")
    limits = config.limits
    if for_deletion:
        per_pattern, total = limits.build_delete_per_pattern, limits.build_delete_total
    else:
        per_pattern, total = limits.build_preview_per_pattern, limits.build_preview_total

    patterns = [_pattern_parts(p) for p in category.dir_patterns]
    age = _age_predicate(config.min_age_days)

    logger.info("Scanning for build artifacts...")
    files: list[Path] = []
    for root in existing_search_roots(category):
        per_pattern_counts: dict[tuple[str, ...], int] = {}

        def _in_artifact_dir(path: Path, st: os.stat_result) -> bool:
            parents = PurePath(path).relative_to(root).parts[:-1]
            matched = _matching_pattern(parents, patterns)
            if matched is None:
                return False
            if per_pattern_counts.get(matched, 0) >= per_pattern:
                return False
            per_pattern_counts[matched] = per_pattern_counts.get(matched, 0) + 1
            return True

        remaining = total - len(files)
        if remaining <= 0:
            break
        caps = ScanCaps(
            max_depth=limits.build_artifact_depth,
            max_results=remaining,
            time_budget=limits.time_budget_seconds,
        )
        # The counting predicate must run last so rejected files are not counted
        predicate = all_of(not_excluded, age, _in_artifact_dir)
        files.extend(walk_files(root, predicate, caps))
    return files


def _scan_build_artifacts_category(config: RunConfig) -> ScanResult:
    category = get_category("build_artifacts")

    if config.min_age_days > 0:
        files = scan_build_artifacts(config)
        return ScanResult(
            category_name=category.id,
            display_path=category.display_path,
            item_count=len(files),
            total_bytes=sum(file_size(p) for p in files),
        )

    total = sum(get_directory_size(d) for d in find_build_artifact_dirs(config))
    return ScanResult(
        category_name=category.id,
        display_path=category.display_path,
        item_count=_estimate_count(total, config.limits.build_avg_file_bytes),
        total_bytes=total,
        is_estimate=True,
    )


# =============================================================================
# Docker volumes
# =============================================================================


def list_docker_volumes(config: RunConfig) -> list[str] | None:
    """
    List Docker volume names.

    Returns:
        Volume names, or None when the docker CLI is missing or unresponsive
    """
    if not command_exists("docker"):
        return None
    try:
        result = run_command(
            ["docker", "volume", "ls", "-q"],
            timeout=config.limits.docker_timeout_seconds,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.warning("Could not list Docker volumes: %s", e)
        return None
    if not result.success:
        logger.debug("docker volume ls failed: %s", result.stderr.strip())
        return None
    return [line for line in result.stdout.splitlines() if line.strip()]


def count_docker_volumes(config: RunConfig) -> int | None:
    """Number of Docker volumes, or None when Docker is unavailable."""
    volumes = list_docker_volumes(config)
    return None if volumes is None else len(volumes)


def _scan_volumes_category(config: RunConfig) -> ScanResult:
    category = get_category("volumes")
    count = count_docker_volumes(config)
    # Volume content size is not cheaply obtainable
    return ScanResult(
        category_name=category.id,
        display_path=category.display_path,
        item_count=count or 0,
        total_bytes=0,
    )


# =============================================================================
# Orphaned applications
# =============================================================================


def _scan_orphaned_apps_category(config: RunConfig) -> ScanResult:
    from osoptimize.orphans import find_orphaned_apps

    category = get_category("orphaned_apps")
    orphans = find_orphaned_apps(config)
    return ScanResult(
        category_name=category.id,
        display_path=category.display_path,
        item_count=len(orphans),
        total_bytes=sum(o.size_bytes for o in orphans),
    )


_SPECIAL_SCANNERS = {
    "node_modules": _scan_node_modules_category,
    "build_artifacts": _scan_build_artifacts_category,
    "volumes": _scan_volumes_category,
    "orphaned_apps": _scan_orphaned_apps_category,
}


def scan_cleanup_category(
    category_id: str,
    config: RunConfig | None = None,
    min_age_days: int | None = None,
) -> ScanResult:
    """
    Scan one cleanup category.

    Never raises: inaccessible roots, missing helper commands and unexpected
    errors all produce an empty result so one category cannot abort a preview.

    Args:
        category_id: Category ID
        config: Run configuration
        min_age_days: Overrides config.min_age_days when given

    Returns:
        ScanResult with item count and size
    """
    config = config or RunConfig()
    if min_age_days is not None:
        config = config.model_copy(update={"min_age_days": min_age_days})

    category = get_category(category_id)
    if category is None:
        logger.warning("Unknown category: %s", category_id)
        return ScanResult(category_name=category_id, error=f"Unknown category: {category_id}")

    try:
        scanner = _SPECIAL_SCANNERS.get(category_id)
        if scanner is not None:
            return scanner(config)
        return _scan_single_path(category_id, config)
    except Exception as e:
        logger.warning("Scan of %s failed: %s", category_id, e)
        return ScanResult(
            category_name=category_id,
            display_path=category.display_path or "",
            error=str(e),
        )
