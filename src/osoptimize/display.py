"""Rich terminal display for os-optimize."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from osoptimize.models import (
    CleanupPreview,
    DeletionResult,
    DeletionStatus,
    OrphanedApplication,
    RunConfig,
)

console = Console()

PATH_WIDTH = 38
PATH_TAIL = 35


def format_size(size_bytes: int) -> str:
    """Format bytes as MB below 1 GB and GB above (binary units)."""
    if size_bytes >= 1024**3:
        return f"{size_bytes / 1024**3:.2f} GB"
    return f"{size_bytes / 1024**2:.2f} MB"


def truncate_path(path: str, width: int = PATH_WIDTH, tail: int = PATH_TAIL) -> str:
    """Shorten long paths to '...' plus their last characters."""
    if len(path) <= width:
        return path
    return "..." + path[-tail:]


def print_info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]![/yellow] {message}")


def print_error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def confirm_action(message: str, default: bool = False) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message, default=default, console=console)


def show_scanning_progress() -> Progress:
    """Create progress bar for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def show_cleanup_preview(preview: CleanupPreview) -> None:
    """Display the per-category preview table with a grand total."""
    title = "Cleanup Preview"
    if preview.min_age_days > 0:
        title += f" (files older than {preview.min_age_days} days)"

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Path")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")

    for result in preview.non_empty:
        files = f"~{result.item_count}" if result.is_estimate else str(result.item_count)
        table.add_row(
            result.category_name,
            truncate_path(result.display_path),
            files,
            format_size(result.total_bytes),
        )

    table.add_section()
    table.add_row(
        "[bold]TOTAL[/bold]",
        "",
        f"[bold]{preview.total_items}[/bold]",
        f"[bold]{format_size(preview.total_bytes)}[/bold]",
    )

    console.print(table)
    if not preview.non_empty:
        print_info("Nothing to clean")


def show_categories(rows: list[tuple[str, str, str, str]]) -> None:
    """Display category id, name, kind and resolved root."""
    table = Table(title="Cleanup Categories", show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Root")

    for row in rows:
        table.add_row(*row)
    console.print(table)


def show_deletion_result(result: DeletionResult) -> None:
    """Display the outcome of one category deletion."""
    name = result.category_name
    if result.status == DeletionStatus.COMPLETED:
        line = f"{name}: {result.deleted_count} deleted, {result.failed_count} failed"
        if result.failed_count:
            print_warning(line)
        else:
            print_success(line)
    elif result.status == DeletionStatus.NOTHING_TO_DO:
        print_info(f"{name}: nothing to clean")
    elif result.status == DeletionStatus.DRY_RUN:
        print_info(
            f"{name}: would delete {result.candidate_count} items "
            f"({format_size(result.bytes_targeted)})"
        )
    elif result.status == DeletionStatus.CANCELLED:
        print_warning(f"{name}: cancelled")
    else:
        print_error(f"{name}: {result.message or 'failed'}")


def show_orphans(orphans: list[OrphanedApplication]) -> None:
    """Display orphaned application directories with their sizes."""
    if not orphans:
        print_info("No orphaned application directories found")
        return

    table = Table(title="Orphaned Applications", show_header=True, header_style="bold")
    table.add_column("Application")
    table.add_column("Directory")
    table.add_column("Size", justify="right")

    for orphan in sorted(orphans, key=lambda o: o.size_bytes, reverse=True):
        table.add_row(
            orphan.app_identifier,
            truncate_path(str(orphan.directory_path)),
            format_size(orphan.size_bytes),
        )
    console.print(table)
    console.print(
        f"[bold]Total: {format_size(sum(o.size_bytes for o in orphans))}[/bold]"
    )


def show_dev_files_warning(category_name: str, count: int) -> None:
    """Warn that development files are among the deletion candidates."""
    console.print(
        Panel(
            f"{count} development files found in [bold]{category_name}[/bold]\n"
            "(build output, dependencies, source maps). Projects may need a rebuild.",
            title="[bold yellow]Development files detected[/bold yellow]",
            border_style="yellow",
        )
    )


def show_dry_run_banner(config: RunConfig) -> None:
    if config.dry_run:
        console.print("[yellow]DRY RUN - No files will be deleted[/yellow]\n")
