"""Data models for os-optimize."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from osoptimize.platforms import Platform, current_platform


class CategoryKind(str, Enum):
    """How the deletion targets of a category are discovered."""

    SINGLE_PATH = "single_path"  # One root directory per platform
    MULTI_PATH_SPECIAL = "multi_path_special"  # Custom discovery logic


class Category(BaseModel):
    """Definition of a cleanup category."""

    id: str = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Human-readable name")
    kind: CategoryKind = Field(CategoryKind.SINGLE_PATH, description="Discovery strategy")
    paths: dict[Platform, str] = Field(
        default_factory=dict,
        description="Root path per platform (supports ~ expansion)",
    )
    display_path: Optional[str] = Field(
        None,
        description="Placeholder shown in reports for categories without a single root",
    )

    # Project-directory discovery
    dir_patterns: list[str] = Field(
        default_factory=list,
        description="Directory names (or name/sub paths) to discover, e.g. 'node_modules'",
    )
    search_roots: list[str] = Field(
        default_factory=list,
        description="Root directories to search for dir_patterns",
    )
    description: str = Field(..., description="What this category contains")
    consequences: str = Field(..., description="What happens if deleted")

    @property
    def is_special(self) -> bool:
        """Whether this category needs custom discovery logic."""
        return self.kind == CategoryKind.MULTI_PATH_SPECIAL


class ScanResult(BaseModel):
    """Result of scanning a single category."""

    category_name: str = Field(..., description="Category identifier")
    display_path: str = Field("", description="Scanned root or a placeholder label")
    item_count: int = Field(0, ge=0, description="Number of candidates (may be an estimate)")
    total_bytes: int = Field(0, ge=0, description="Best-effort size of all candidates")
    is_estimate: bool = Field(False, description="Whether item_count is derived from size")
    error: Optional[str] = Field(None, description="Error message if scan failed")

    @model_validator(mode="after")
    def _no_items_no_size(self) -> "ScanResult":
        if self.item_count == 0:
            self.total_bytes = 0
        return self

    @property
    def is_empty(self) -> bool:
        """True when no candidates were found."""
        return self.item_count == 0

    @property
    def size_mb(self) -> float:
        """Size in mebibytes."""
        return self.total_bytes / (1024**2)

    @property
    def size_human(self) -> str:
        """Human-readable size string (MB below 1 GB, GB above)."""
        if self.total_bytes >= 1024**3:
            return f"{self.total_bytes / 1024**3:.2f} GB"
        return f"{self.size_mb:.2f} MB"


class DeletionCandidate(BaseModel):
    """A concrete path queued for removal."""

    path: Path = Field(..., description="Absolute path to remove")
    is_directory: bool = Field(False, description="Whether the path is removed recursively")
    size_bytes: int = Field(0, ge=0, description="Best-effort size")


class InstalledApp(BaseModel):
    """An application found during the inventory phase."""

    name: str = Field(..., description="Display name (bundle or binary name)")
    bundle_id: Optional[str] = Field(None, description="CFBundleIdentifier, macOS only")
    path: Optional[Path] = Field(None, description="Bundle or binary location")


class OrphanedApplication(BaseModel):
    """A support/config directory whose owning application is absent."""

    directory_path: Path = Field(..., description="Support or config directory")
    app_identifier: str = Field(..., description="Bundle ID or plain app name")
    is_bundle_id: bool = Field(False, description="Whether app_identifier is reverse-DNS")
    matched_installed_app: Optional[str] = Field(
        None, description="Name of the installed app that claims this directory"
    )
    size_bytes: int = Field(0, ge=0, description="Aggregate directory size")

    @property
    def is_orphaned(self) -> bool:
        """True when no installed application matched."""
        return self.matched_installed_app is None


class DeletionStatus(str, Enum):
    """Final state of a category deletion."""

    COMPLETED = "completed"
    NOTHING_TO_DO = "nothing_to_do"
    DRY_RUN = "dry_run"
    CANCELLED = "cancelled"
    FAILED = "failed"


class DeletionResult(BaseModel):
    """Result of a category deletion."""

    category_name: str = Field(..., description="Category that was processed")
    status: DeletionStatus = Field(..., description="Final state")
    deleted_count: int = Field(0, ge=0, description="Items removed")
    failed_count: int = Field(0, ge=0, description="Items that could not be removed")
    candidate_count: int = Field(0, ge=0, description="Items found by the deletion scan")
    bytes_targeted: int = Field(0, ge=0, description="Size of the candidates")
    message: Optional[str] = Field(None, description="Reason for cancelled/failed results")

    @property
    def exit_code(self) -> int:
        """0 when completed or nothing to do, 1 when cancelled or failed."""
        if self.status in (DeletionStatus.CANCELLED, DeletionStatus.FAILED):
            return 1
        return 0


class ScanLimits(BaseModel):
    """Caps that bound every filesystem walk.

    Sampling accuracy is traded against worst-case latency, so each cap is
    tunable through the config file.
    """

    # node_modules discovery
    node_modules_dirs_per_root: int = Field(20, ge=1)
    node_modules_search_depth: int = Field(4, ge=1)
    preview_files_per_dir: int = Field(50, ge=1)
    aged_files_per_dir: int = Field(500, ge=1)
    node_modules_sample_total: int = Field(1000, ge=1)
    node_modules_sample_depth: int = Field(2, ge=1)

    # build artifacts
    build_artifact_depth: int = Field(5, ge=1)
    build_preview_per_pattern: int = Field(100, ge=1)
    build_preview_total: int = Field(500, ge=1)
    build_delete_per_pattern: int = Field(1000, ge=1)
    build_delete_total: int = Field(2000, ge=1)
    build_dirs_per_pattern: int = Field(50, ge=1)

    # single-path categories
    single_path_max_results: int = Field(10_000, ge=1)
    single_path_max_depth: int = Field(32, ge=1)

    # size estimates for special categories
    node_modules_avg_file_bytes: int = Field(10 * 1024, ge=1)
    build_avg_file_bytes: int = Field(50 * 1024, ge=1)

    applications_depth: int = Field(2, ge=1)
    time_budget_seconds: float = Field(30.0, gt=0)
    docker_timeout_seconds: float = Field(10.0, gt=0)


class RunConfig(BaseModel):
    """Options threaded through every scan and delete call."""

    platform: Platform = Field(default_factory=current_platform)
    force: bool = Field(False, description="Skip the generic confirmation prompt")
    dry_run: bool = Field(False, description="Report only, never delete")
    min_age_days: int = Field(0, ge=0, description="Only files older than N days (0 = all)")
    limits: ScanLimits = Field(default_factory=ScanLimits)
    category_paths: dict[str, str] = Field(
        default_factory=dict,
        description="Per-category root overrides",
    )


class CleanupPreview(BaseModel):
    """Aggregated scan results for all categories of a platform."""

    timestamp: datetime = Field(default_factory=datetime.now)
    min_age_days: int = Field(0, ge=0)
    results: list[ScanResult] = Field(default_factory=list)

    @property
    def non_empty(self) -> list[ScanResult]:
        """Results that found something to clean."""
        return [r for r in self.results if not r.is_empty]

    @property
    def total_items(self) -> int:
        """Sum of item counts across categories."""
        return sum(r.item_count for r in self.results)

    @property
    def total_bytes(self) -> int:
        """Sum of sizes across categories."""
        return sum(r.total_bytes for r in self.results)
