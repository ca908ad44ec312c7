"""Logging setup for os-optimize."""

import logging
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from osoptimize.config import CONFIG_DIR

LOG_DIR = CONFIG_DIR / "logs"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def log_file_path(log_dir: Path = LOG_DIR, now: datetime | None = None) -> Path:
    """Path of the log file for a run started at `now`."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"cleanup-{stamp}.log"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_dir: Path | None = LOG_DIR,
) -> Path | None:
    """
    Configure the package logger.

    Console output goes through rich at WARNING (INFO with verbose, ERROR with
    quiet). When log_dir is given every DEBUG record is also written to a
    timestamped file there.

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    logger = logging.getLogger("osoptimize")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if quiet:
        console_level = logging.ERROR
    elif verbose:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING

    console_handler = RichHandler(show_path=False, rich_tracebacks=True)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_dir is None:
        return None

    path = log_file_path(log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
    except OSError as e:
        logger.warning("File logging disabled, cannot write to %s: %s", log_dir, e)
        return None

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)
    return path
