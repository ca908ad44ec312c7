"""Tests for logging setup."""

import logging
from datetime import datetime

from osoptimize.logs import log_file_path, setup_logging


class TestSetupLogging:
    def teardown_method(self):
        logger = logging.getLogger("osoptimize")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_log_file_name(self, tmp_path):
        path = log_file_path(tmp_path, datetime(2024, 5, 1, 13, 45, 9))
        assert path == tmp_path / "cleanup-20240501-134509.log"

    def test_writes_debug_records_to_file(self, tmp_path):
        path = setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("osoptimize.scanner").debug("scanning caches")
        for handler in logging.getLogger("osoptimize").handlers:
            handler.flush()
        assert "scanning caches" in path.read_text()

    def test_console_levels(self, tmp_path):
        setup_logging(log_dir=None)
        console = logging.getLogger("osoptimize").handlers[0]
        assert console.level == logging.WARNING

        setup_logging(verbose=True, log_dir=None)
        assert logging.getLogger("osoptimize").handlers[0].level == logging.INFO

        setup_logging(quiet=True, log_dir=None)
        assert logging.getLogger("osoptimize").handlers[0].level == logging.ERROR

    def test_no_duplicate_handlers(self, tmp_path):
        setup_logging(log_dir=None)
        setup_logging(log_dir=None)
        assert len(logging.getLogger("osoptimize").handlers) == 1

    def test_unwritable_log_dir(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert setup_logging(log_dir=blocker / "logs") is None
