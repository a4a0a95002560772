"""
Logging for JobTracker.

One process-wide StructuredLogger writes to the console and to a daily log
file. It also keeps per-operation counters for the repositories, which the
CLI reports when a command finishes.
"""

import json
import logging
import sys
import threading
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
    return handler


class StructuredLogger:
    """
    Logger whose messages carry a JSON context suffix.

    Operation counters are guarded by a lock, so concurrent requests under a
    threaded server are counted exactly.
    """

    def __init__(
        self,
        name: str = "jobtracker",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Args:
            name: Logger name
            level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for the daily log file (default: logs/)
            enable_file: Write logs to file
            enable_console: Write logs to stdout
        """
        console_level = getattr(logging, level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(console_level)
        self.logger.handlers.clear()

        self._lock = threading.Lock()
        self._operations: Dict[str, Counter] = {}
        self._errors: Counter = Counter()

        if enable_console:
            self.logger.addHandler(_handler(logging.StreamHandler(sys.stdout), console_level, CONSOLE_FORMAT))

        if enable_file:
            log_dir = Path(log_dir) if log_dir is not None else Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"jobtracker_{datetime.now().strftime('%Y%m%d')}.log"
            # file gets everything regardless of console level
            self.logger.addHandler(
                _handler(logging.FileHandler(log_file, encoding='utf-8'), logging.DEBUG, FILE_FORMAT)
            )

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, context)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Operation counters

    def _count(self, operation: str, outcome: str) -> None:
        with self._lock:
            self._operations.setdefault(operation, Counter())[outcome] += 1

    def record_attempt(self, operation: str):
        self._count(operation, "attempts")

    def record_success(self, operation: str):
        self._count(operation, "successes")

    def record_failure(self, operation: str, error_type: str):
        """Count a failed operation and the exception type that caused it."""
        with self._lock:
            self._operations.setdefault(operation, Counter())["failures"] += 1
            self._errors[error_type] += 1

    def get_metrics(self) -> dict:
        """
        Snapshot of the counters.

        Returns:
            {"attempted", "succeeded", "failed", "errors_by_type",
             "operations": {name: {"attempts", "successes", "failures", "success_rate"}}}
        """
        with self._lock:
            operations = {}
            for name, counts in self._operations.items():
                attempts = counts["attempts"]
                operations[name] = {
                    "attempts": attempts,
                    "successes": counts["successes"],
                    "failures": counts["failures"],
                    "success_rate": round(counts["successes"] / attempts, 3) if attempts else 0.0,
                }
            errors = dict(self._errors)

        return {
            "attempted": sum(op["attempts"] for op in operations.values()),
            "succeeded": sum(op["successes"] for op in operations.values()),
            "failed": sum(op["failures"] for op in operations.values()),
            "errors_by_type": errors,
            "operations": operations,
        }

    def log_metrics_summary(self):
        """Log the counters collected so far; nothing is logged before the first operation."""
        metrics = self.get_metrics()
        if not metrics["attempted"]:
            return

        overall = round(metrics["succeeded"] / metrics["attempted"] * 100, 1)
        self.info("=== Repository Metrics ===")
        self.info(f"Operations: {metrics['succeeded']}/{metrics['attempted']} ({overall}% success)")
        for name, op in sorted(metrics["operations"].items()):
            self.info(f"  {name}: {op['successes']}/{op['attempts']} ({op['success_rate'] * 100:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "jobtracker", level: str = "INFO", **kwargs) -> StructuredLogger:
    """
    Return the process-wide logger, creating it on first use.

    Arguments only take effect on the call that creates it.
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger so the next get_logger() builds a fresh one."""
    global _global_logger
    _global_logger = None
