"""Cleanup preview: one scan per category, aggregated into a report."""

import logging
from typing import Callable, Optional

from osoptimize import display
from osoptimize.categories import get_cleanup_categories
from osoptimize.models import CleanupPreview, RunConfig
from osoptimize.scanner import scan_cleanup_category

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def build_cleanup_preview(
    config: RunConfig | None = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> CleanupPreview:
    """
    Scan every category of the platform, sequentially.

    The preview is advisory: deletion rescans instead of reusing these results.

    Args:
        config: Run configuration
        progress_callback: Called as (category_id, index, total) before each scan

    Returns:
        CleanupPreview holding one ScanResult per category
    """
    config = config or RunConfig()
    categories = get_cleanup_categories(config)
    preview = CleanupPreview(min_age_days=config.min_age_days)

    for i, category_id in enumerate(categories):
        if progress_callback:
            progress_callback(category_id, i, len(categories))
        preview.results.append(scan_cleanup_category(category_id, config))

    logger.info(
        "Preview: %d items, %d bytes across %d categories",
        preview.total_items,
        preview.total_bytes,
        len(preview.non_empty),
    )
    return preview


def show_cleanup_preview(config: RunConfig | None = None) -> CleanupPreview:
    """Build the preview with a progress bar and print the report table."""
    config = config or RunConfig()
    total = len(get_cleanup_categories(config))

    with display.show_scanning_progress() as progress:
        task = progress.add_task("Scanning...", total=total)

        def _advance(category_id: str, index: int, count: int) -> None:
            progress.update(task, description=f"Scanning {category_id}...", completed=index)

        preview = build_cleanup_preview(config, _advance)
        progress.update(task, completed=total)

    display.show_cleanup_preview(preview)
    return preview
