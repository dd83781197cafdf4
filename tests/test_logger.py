"""
Tests for logger functionality.
"""

import pytest
from logobackfill.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        logger = StructuredLogger(name="test", level="INFO", log_dir=tmp_path, enable_console=False)

        assert logger.logger.name == "test"
        assert logger.metrics["records_processed"] == 0
        assert logger.metrics["service_calls"] == {}

    def test_log_with_context(self, tmp_path):
        """Context is appended to the message as JSON."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Updated record", record_id="rec1", url="https://i.ibb.co/a.png")

        content = next(tmp_path.glob("*.log")).read_text()
        assert 'Updated record | Context: {"record_id": "rec1", "url": "https://i.ibb.co/a.png"}' in content

    def test_metrics_tracking(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_service_call("logo")
        logger.record_service_call("logo")
        logger.record_service_call("imgbb")
        logger.record_skip()
        logger.record_attempt()
        logger.record_success()
        logger.record_attempt()
        logger.record_failure("LogoNotFoundError")

        metrics = logger.get_metrics()

        assert metrics["service_calls"] == {"logo": 2, "imgbb": 1}
        assert metrics["records_skipped"] == 1
        assert metrics["records_processed"] == 2
        assert metrics["records_succeeded"] == 1
        assert metrics["records_failed"] == 1
        assert metrics["errors_by_type"] == {"LogoNotFoundError": 1}
        assert metrics["success_rate"] == 0.5

    def test_success_rate_without_attempts(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        assert logger.get_metrics()["success_rate"] == 0.0

    def test_success_rate_rounding(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        for _ in range(3):
            logger.record_attempt()
        logger.record_success()
        logger.record_success()

        assert logger.get_metrics()["success_rate"] == pytest.approx(0.667, rel=0.01)

    def test_metrics_summary_written(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_service_call("airtable")
        logger.record_attempt()
        logger.record_failure("RateLimitedError")

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "=== Logo Backfill Metrics ===" in content
        assert "airtable: 1" in content
        assert "RateLimitedError: 1" in content

    def test_console_output(self, capsys):
        logger = StructuredLogger(name="test-console", enable_file=False)
        logger.info("Processing: example.com")
        assert "Processing: example.com" in capsys.readouterr().out

    def test_log_file_creation(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.debug("Debug goes to file")

        log_files = list(tmp_path.glob("logobackfill_*.log"))
        assert len(log_files) == 1
        assert "Debug goes to file" in log_files[0].read_text()

    def test_console_level_does_not_filter_file(self, tmp_path, capsys):
        """DEBUG reaches the file even when the console shows INFO and up."""
        logger = StructuredLogger(name="test-split", level="INFO", log_dir=tmp_path)
        logger.debug("Listed records")

        assert "Listed records" not in capsys.readouterr().out
        assert "Listed records" in next(tmp_path.glob("*.log")).read_text()


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2
        reset_logger()

    def test_reset_logger(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_service_call("logo")

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)
        assert logger2.metrics["service_calls"] == {}
        reset_logger()
