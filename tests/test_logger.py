"""
Tests for logger functionality.
"""

import threading

import pytest
from jobtracker.logger import StructuredLogger, get_logger, reset_logger


@pytest.fixture
def file_logger(tmp_path):
    return StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)


def log_text(tmp_path):
    return next(tmp_path.glob("*.log")).read_text()


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, file_logger):
        assert file_logger.logger.name == "test"
        assert file_logger.get_metrics()["attempted"] == 0

    def test_log_with_context(self, file_logger, tmp_path):
        """Context is appended to the message as JSON."""
        file_logger.error("list_jobs failed", owner_id="user_a", page=2)

        assert len(list(tmp_path.glob("*.log"))) == 1
        assert 'list_jobs failed | Context: {"owner_id": "user_a", "page": 2}' in log_text(tmp_path)

    def test_metrics_tracking(self, file_logger):
        file_logger.record_attempt("create_job")
        file_logger.record_success("create_job")

        file_logger.record_attempt("list_jobs")
        file_logger.record_failure("list_jobs", "OperationalError")

        metrics = file_logger.get_metrics()

        assert metrics["attempted"] == 2
        assert metrics["succeeded"] == 1
        assert metrics["failed"] == 1
        assert metrics["errors_by_type"] == {"OperationalError": 1}
        assert metrics["operations"]["create_job"]["success_rate"] == 1.0
        assert metrics["operations"]["list_jobs"]["success_rate"] == 0.0
        assert metrics["operations"]["list_jobs"]["failures"] == 1

    def test_success_rate_calculation(self, file_logger):
        for _ in range(3):
            file_logger.record_attempt("get_job")

        file_logger.record_success("get_job")
        file_logger.record_success("get_job")

        rate = file_logger.get_metrics()["operations"]["get_job"]["success_rate"]
        assert rate == pytest.approx(0.667, rel=0.01)

    def test_snapshot_is_detached(self, file_logger):
        file_logger.record_attempt("get_job")
        snapshot = file_logger.get_metrics()
        snapshot["operations"]["get_job"]["attempts"] = 99

        assert file_logger.get_metrics()["operations"]["get_job"]["attempts"] == 1

    def test_concurrent_counting_is_exact(self, file_logger):
        def work():
            for _ in range(2000):
                file_logger.record_attempt("list_jobs")
                file_logger.record_success("list_jobs")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        op = file_logger.get_metrics()["operations"]["list_jobs"]
        assert op["attempts"] == 16000
        assert op["successes"] == 16000

    def test_metrics_summary(self, file_logger, tmp_path):
        file_logger.record_attempt("delete_job")
        file_logger.record_failure("delete_job", "IntegrityError")

        file_logger.log_metrics_summary()

        content = log_text(tmp_path)
        assert "Operations: 0/1 (0.0% success)" in content
        assert "delete_job: 0/1 (0.0%)" in content
        assert "IntegrityError: 1" in content

    def test_metrics_summary_silent_without_operations(self, file_logger, tmp_path):
        file_logger.log_metrics_summary()
        assert "Repository Metrics" not in log_text(tmp_path)


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_attempt("create_job")

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2.get_metrics()["attempted"] == 0
