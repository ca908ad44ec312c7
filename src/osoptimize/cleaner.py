"""Confirmation-gated deletion for os-optimize.

Every category goes through the same steps: scan afresh, stop if empty,
report-only on dry run, confirm, then delete item by item. Deletion never
reuses preview results.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable

from osoptimize import display
from osoptimize.bounded_scanner import list_children, older_than
from osoptimize.categories import get_category, get_category_path
from osoptimize.classifier import is_dev_file, should_exclude_file
from osoptimize.models import (
    Category,
    DeletionCandidate,
    DeletionResult,
    DeletionStatus,
    RunConfig,
)
from osoptimize.orphans import find_orphaned_apps, find_preference_files
from osoptimize.platforms import Platform
from osoptimize.process import CommandTimeout, command_exists, run_command, run_with_timeout
from osoptimize.scanner import (
    collect_files,
    file_size,
    find_node_modules_dirs,
    get_directory_size,
    list_docker_volumes,
    scan_build_artifacts,
)

logger = logging.getLogger(__name__)

Confirmer = Callable[[str, bool], bool]

EMPTY_TRASH_SCRIPT = 'tell application "Finder" to empty trash'

RESTORE_HINT = "Restore dependencies with: npm install / yarn install / pnpm install"


def delete_path(path: Path) -> str | None:
    """
    Delete a file, symlink or directory tree.

    Args:
        path: Path to delete

    Returns:
        None on success (or if already gone), otherwise an error message
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        return None
    except FileNotFoundError:
        return None
    except PermissionError as e:
        return f"Permission denied: {e}"
    except OSError as e:
        return f"OS error: {e}"


def delete_candidates(candidates: list[DeletionCandidate]) -> tuple[int, int]:
    """
    Delete each candidate, continuing past failures.

    Returns:
        Tuple of (deleted_count, failed_count)
    """
    deleted = 0
    failed = 0
    for candidate in candidates:
        error = delete_path(candidate.path)
        if error is None:
            deleted += 1
        else:
            failed += 1
            logger.warning("Failed to delete %s: %s", candidate.path, error)
    return deleted, failed


# =============================================================================
# Candidate discovery (always a fresh scan)
# =============================================================================


def _directory_candidates(paths: list[Path]) -> list[DeletionCandidate]:
    return [
        DeletionCandidate(path=p, is_directory=True, size_bytes=get_directory_size(p))
        for p in paths
    ]


def _trash_candidates(root: Path, config: RunConfig) -> list[DeletionCandidate]:
    age = older_than(config.min_age_days) if config.min_age_days > 0 else None
    candidates = []
    for item in list_children(root):
        if should_exclude_file(item):
            continue
        try:
            st = item.lstat()
        except OSError:
            continue
        if age is not None and not age(item, st):
            continue
        is_dir = item.is_dir() and not item.is_symlink()
        size = get_directory_size(item) if is_dir else st.st_size
        candidates.append(DeletionCandidate(path=item, is_directory=is_dir, size_bytes=size))
    return candidates


def collect_candidates(category: Category, config: RunConfig) -> list[DeletionCandidate]:
    """
    Scan a category for the concrete paths a deletion would remove.

    Args:
        category: Category to scan
        config: Run configuration

    Returns:
        Deletion candidates; empty when the category root does not exist
    """
    if category.id == "node_modules":
        return _directory_candidates(find_node_modules_dirs(config, complete=True))

    if category.id == "build_artifacts":
        return [
            DeletionCandidate(path=p, size_bytes=file_size(p))
            for p in scan_build_artifacts(config, for_deletion=True)
        ]

    if category.id == "orphaned_apps":
        return [
            DeletionCandidate(path=o.directory_path, is_directory=True, size_bytes=o.size_bytes)
            for o in find_orphaned_apps(config)
        ]

    root = get_category_path(category.id, config)
    if root is None or not root.exists():
        logger.info("Category %s: path not found (%s)", category.id, root)
        return []

    if category.id == "browser_trash":
        return _trash_candidates(root, config)
    return collect_files(root, config)


def count_dev_files(category: Category, candidates: list[DeletionCandidate]) -> int:
    """Number of candidates whose full path classifies as a development file."""
    if category.id == "node_modules":
        return len(candidates)
    return sum(1 for c in candidates if is_dev_file(c.path))


# =============================================================================
# Category-specific deletion
# =============================================================================


def _empty_macos_trash(candidates: list[DeletionCandidate]) -> tuple[int, int]:
    if command_exists("osascript"):
        logger.info("Emptying trash using Finder...")
        try:
            result = run_command(["osascript", "-e", EMPTY_TRASH_SCRIPT], timeout=120)
            if result.success:
                return len(candidates), 0
            logger.warning("Finder could not empty the trash: %s", result.stderr.strip())
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.warning("Finder could not empty the trash: %s", e)

    deleted = 0
    failed = 0
    can_sudo = command_exists("sudo")
    for candidate in candidates:
        error = delete_path(candidate.path)
        if error is not None and can_sudo:
            # Locked items; -n never waits for a password
            try:
                result = run_command(["sudo", "-n", "rm", "-rf", str(candidate.path)])
                error = None if result.success else result.stderr.strip() or error
            except (subprocess.TimeoutExpired, OSError) as e:
                error = str(e)
        if error is None:
            deleted += 1
        else:
            failed += 1
            logger.warning("Failed to delete %s (may be locked): %s", candidate.path, error)
    return deleted, failed


def _delete_orphans(candidates: list[DeletionCandidate]) -> tuple[int, int]:
    deleted, failed = delete_candidates(candidates)
    for candidate in candidates:
        for pref in find_preference_files(candidate.path.name):
            error = delete_path(pref)
            if error is None:
                logger.debug("Deleted preference: %s", pref.name)
            else:
                logger.warning("Failed to delete preference %s: %s", pref, error)
    return deleted, failed


def _count_pruned_volumes(output: str) -> int:
    count = 0
    in_list = False
    for line in output.splitlines():
        line = line.strip()
        if line.startswith("Deleted Volumes"):
            in_list = True
            continue
        if in_list:
            if not line or line.startswith("Total reclaimed"):
                break
            count += 1
    return count


def _delete_docker_volumes(config: RunConfig, confirm: Confirmer) -> DeletionResult:
    name = "volumes"
    volumes = list_docker_volumes(config)
    if not volumes:
        logger.info("No Docker volumes found")
        return DeletionResult(category_name=name, status=DeletionStatus.NOTHING_TO_DO)

    if config.dry_run:
        return DeletionResult(
            category_name=name,
            status=DeletionStatus.DRY_RUN,
            candidate_count=len(volumes),
        )

    if not config.force and not confirm(
        f"Remove unused Docker volumes ({len(volumes)} volumes present)?", False
    ):
        logger.info("User cancelled volumes cleanup")
        return DeletionResult(
            category_name=name,
            status=DeletionStatus.CANCELLED,
            candidate_count=len(volumes),
        )

    timeout = config.limits.docker_timeout_seconds
    try:
        info = run_with_timeout(["docker", "info"], timeout)
        if not info.success:
            return _failed(name, "Docker daemon is not running", len(volumes))
        result = run_with_timeout(["docker", "volume", "prune", "-f"], timeout)
    except CommandTimeout as e:
        logger.warning("Docker did not respond: %s", e)
        return _failed(name, f"Docker did not respond within {timeout:g}s", len(volumes))
    except OSError as e:
        return _failed(name, f"Could not run docker: {e}", len(volumes))

    if not result.success:
        return _failed(name, result.stderr.strip() or "docker volume prune failed", len(volumes))

    return DeletionResult(
        category_name=name,
        status=DeletionStatus.COMPLETED,
        deleted_count=_count_pruned_volumes(result.stdout),
        candidate_count=len(volumes),
    )


def _failed(category_name: str, message: str, candidate_count: int = 0) -> DeletionResult:
    logger.warning("%s: %s", category_name, message)
    return DeletionResult(
        category_name=category_name,
        status=DeletionStatus.FAILED,
        candidate_count=candidate_count,
        message=message,
    )


# =============================================================================
# Engine
# =============================================================================


def delete_category_files(
    category_id: str,
    config: RunConfig | None = None,
    confirm: Confirmer = display.confirm_action,
) -> DeletionResult:
    """
    Delete the contents of one category.

    Dry run reports what would be deleted without prompting, even when force
    is set. Force skips the generic prompt but never the development-files
    warning.

    Args:
        category_id: Category ID
        config: Run configuration (force, dry_run, min_age_days)
        confirm: Callable(prompt, default) returning the user's answer

    Returns:
        DeletionResult with status and deleted/failed counts
    """
    config = config or RunConfig()
    category = get_category(category_id)
    if category is None:
        return _failed(category_id, f"Unknown category: {category_id}")

    if category_id == "orphaned_apps" and config.platform != Platform.MACOS:
        return _failed(category_id, "Orphaned apps cleanup is only available on macOS")

    try:
        if category_id == "volumes":
            return _delete_docker_volumes(config, confirm)
        return _delete_scanned(category, config, confirm)
    except Exception as e:
        logger.exception("Cleanup of %s failed", category_id)
        return _failed(category_id, str(e))


def _delete_scanned(category: Category, config: RunConfig, confirm: Confirmer) -> DeletionResult:
    logger.info("Scanning %s for deletion...", category.id)
    candidates = collect_candidates(category, config)
    total_bytes = sum(c.size_bytes for c in candidates)

    if not candidates:
        logger.info("%s: nothing to clean", category.id)
        return DeletionResult(category_name=category.id, status=DeletionStatus.NOTHING_TO_DO)

    summary = dict(candidate_count=len(candidates), bytes_targeted=total_bytes)

    if config.dry_run:
        logger.info("[DRY RUN] Would delete %d items from %s", len(candidates), category.id)
        return DeletionResult(category_name=category.id, status=DeletionStatus.DRY_RUN, **summary)

    if category.id == "orphaned_apps":
        display.print_warning(f"Found {len(candidates)} orphaned application(s):")
        for c in candidates:
            display.print_info(f"  - {c.path.name} ({display.format_size(c.size_bytes)})")

    dev_count = count_dev_files(category, candidates)
    if dev_count:
        display.show_dev_files_warning(category.name, dev_count)
        if not confirm("Delete development files anyway?", False):
            logger.info("User cancelled %s cleanup (development files)", category.id)
            return DeletionResult(
                category_name=category.id, status=DeletionStatus.CANCELLED, **summary
            )

    if not config.force:
        prompt = (
            f"Delete {len(candidates)} items "
            f"({display.format_size(total_bytes)}) from {category.name}?"
        )
        if not confirm(prompt, False):
            logger.info("User cancelled %s cleanup", category.id)
            return DeletionResult(
                category_name=category.id, status=DeletionStatus.CANCELLED, **summary
            )

    if category.id == "browser_trash" and config.platform == Platform.MACOS:
        deleted, failed = _empty_macos_trash(candidates)
    elif category.id == "orphaned_apps":
        deleted, failed = _delete_orphans(candidates)
    else:
        deleted, failed = delete_candidates(candidates)

    logger.info("%s: deleted %d, failed %d", category.id, deleted, failed)
    if category.id == "node_modules" and deleted:
        display.print_info(RESTORE_HINT)

    return DeletionResult(
        category_name=category.id,
        status=DeletionStatus.COMPLETED,
        deleted_count=deleted,
        failed_count=failed,
        **summary,
    )
