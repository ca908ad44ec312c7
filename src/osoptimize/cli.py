"""CLI interface for os-optimize."""

from typing import List

import typer

from osoptimize import __version__
from osoptimize.categories import CATEGORIES, get_category_path, get_cleanup_categories
from osoptimize.cleaner import delete_category_files
from osoptimize.config import load_run_config
from osoptimize.display import (
    confirm_action,
    console,
    print_error,
    show_categories,
    show_deletion_result,
    show_dry_run_banner,
    show_orphans,
)
from osoptimize.logs import LOG_DIR, setup_logging
from osoptimize.orphans import find_orphaned_apps
from osoptimize.preview import show_cleanup_preview

# Create Typer app
app = typer.Typer(
    name="os-optimize",
    help="Preview and clean caches, logs, build output and leftovers on macOS and Linux",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"os-optimize version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show progress details."),
    quiet: bool = typer.Option(False, "--quiet", help="Only show errors."),
) -> None:
    """os-optimize - interactive disk cleanup for macOS and Linux."""
    setup_logging(verbose=verbose, quiet=quiet, log_dir=LOG_DIR)


@app.command()
def categories() -> None:
    """List the cleanup categories available on this platform."""
    config = load_run_config()
    rows = []
    for category_id in get_cleanup_categories(config):
        category = CATEGORIES[category_id]
        root = get_category_path(category_id, config)
        rows.append(
            (
                category_id,
                category.name,
                "special" if category.is_special else "single path",
                str(root) if root else category.display_path or "",
            )
        )
    show_categories(rows)


@app.command()
def preview(
    min_age: int = typer.Option(0, "--min-age", min=0, help="Only count files older than N days"),
) -> None:
    """Show what each category would free, without deleting anything."""
    config = load_run_config(min_age_days=min_age)
    show_cleanup_preview(config)


@app.command()
def clean(
    category_ids: List[str] = typer.Argument(..., metavar="CATEGORY...", help="Categories to clean"),
    min_age: int = typer.Option(0, "--min-age", min=0, help="Only delete files older than N days"),
    force: bool = typer.Option(
        False, "--force", "-y", help="Skip the confirmation prompt (development files still ask)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report without deleting"),
) -> None:
    """Delete the contents of one or more categories."""
    # Unset flags defer to FORCE_MODE / DRY_RUN and the config file
    config = load_run_config(
        force=force or None, dry_run=dry_run or None, min_age_days=min_age
    )

    valid = get_cleanup_categories(config)
    unknown = [c for c in category_ids if c not in valid]
    if unknown:
        print_error(f"Unknown category: {', '.join(unknown)}")
        console.print(f"Valid categories: {', '.join(valid)}")
        raise typer.Exit(1)

    show_dry_run_banner(config)

    exit_code = 0
    for category_id in category_ids:
        result = delete_category_files(category_id, config, confirm=confirm_action)
        show_deletion_result(result)
        exit_code = max(exit_code, result.exit_code)

    if exit_code:
        raise typer.Exit(exit_code)


@app.command()
def orphans() -> None:
    """List support directories of applications that are no longer installed."""
    config = load_run_config()
    with console.status("Looking for orphaned applications..."):
        found = find_orphaned_apps(config)
    show_orphans(found)


if __name__ == "__main__":
    app()
