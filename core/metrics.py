"""
Prometheus metrics for the planning import worker.

Metrics are grouped in ImportMetrics, which is created once by the
scheduler and passed to every component that records something. Tests
pass a fresh CollectorRegistry so instances never collide.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    REGISTRY,
    start_http_server,
)

logger = logging.getLogger(__name__)


class ImportMetrics:
    """
    Counters and timings for planning file imports

    Tracks file outcomes, reconciliation decisions and event delivery.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize import metrics

        Args:
            registry: Custom Prometheus registry (default: global REGISTRY)
        """
        self.registry = registry or REGISTRY

        self.files_processed_total = Counter(
            "planning_import_files_processed_total",
            "Total number of planning files processed",
            ["status"],
            registry=self.registry,
        )

        self.trains_to_save_total = Counter(
            "planning_import_trains_to_save_total",
            "Number of trains handed to the commit engine",
            registry=self.registry,
        )

        self.trains_skipped_total = Counter(
            "planning_import_trains_skipped_total",
            "Number of planned trains dropped during reconciliation",
            ["reason"],
            registry=self.registry,
        )

        self.trains_cancelled_total = Counter(
            "planning_import_trains_cancelled_total",
            "Number of planning trains cancelled because they left the export",
            registry=self.registry,
        )

        self.events_published_total = Counter(
            "planning_import_events_published_total",
            "Number of domain events handed to the message bus",
            registry=self.registry,
        )

        self.event_publish_failures_total = Counter(
            "planning_import_event_publish_failures_total",
            "Number of committed batches whose events could not be published",
            ["phase"],
            registry=self.registry,
        )

        self.job_duration_seconds = Histogram(
            "planning_import_job_duration_seconds",
            "Duration of import jobs in seconds",
            ["job", "operation", "status"],
            buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300, 900),
            registry=self.registry,
        )

    def record_file(self, status: str) -> None:
        self.files_processed_total.labels(status=status).inc()

    def record_trains_to_save(self, count: int = 1) -> None:
        self.trains_to_save_total.inc(count)

    def record_skip(self, reason: str) -> None:
        self.trains_skipped_total.labels(reason=reason).inc()

    def record_cancelled(self, count: int = 1) -> None:
        self.trains_cancelled_total.inc(count)

    def record_events_published(self, count: int) -> None:
        self.events_published_total.inc(count)

    def record_publish_failure(self, phase: str) -> None:
        self.event_publish_failures_total.labels(phase=phase).inc()

    @contextmanager
    def time_job(self, job: str, operation: str) -> Iterator[None]:
        """
        Time a block of work and record it with its outcome

        Args:
            job: Job name, e.g. "import-trainformation-planning"
            operation: Operation within the job
        """
        start = time.perf_counter()
        status = "success"
        try:
            yield
        except Exception:
            status = "failed"
            raise
        finally:
            self.job_duration_seconds.labels(
                job=job,
                operation=operation,
                status=status,
            ).observe(time.perf_counter() - start)


def start_metrics_server(port: int, registry: Optional[CollectorRegistry] = None) -> bool:
    """
    Expose metrics on /metrics

    Returns:
        True if the HTTP server was started
    """
    try:
        start_http_server(port, registry=registry or REGISTRY)
        logger.info(f"Metrics server started on port {port}")
        return True
    except OSError as e:
        logger.error(f"Metrics server could not start on port {port}: {e}")
        return False
