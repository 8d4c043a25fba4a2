"""
Prometheus metrics for the job queue.

The server is a single process, so plain ``prometheus_client``
counters are enough.  Queue depth, store size and worker activity
are read from the live ``JobQueue`` on each scrape by
``JobQueueCollector``.

Usage:
    Call the ``record_*`` helpers from the submission gate and the
    worker loop.  The ``/metrics`` endpoint calls
    ``generate_metrics()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)
from prometheus_client.core import GaugeMetricFamily

if TYPE_CHECKING:
    from app.services.job_queue import JobQueue


#: Dedicated registry so tests and multiple app instances never
#: collide with the process-wide default registry.
REGISTRY = CollectorRegistry()

JOBS_SUBMITTED = Counter(
    "vanity_jobs_submitted",
    "Jobs created for a previously unseen request.",
    registry=REGISTRY,
)
JOBS_ATTACHED = Counter(
    "vanity_jobs_attached",
    "Requests answered from an existing job.",
    registry=REGISTRY,
)
JOBS_SUCCEEDED = Counter(
    "vanity_jobs_succeeded",
    "Jobs that produced a result key.",
    registry=REGISTRY,
)
JOBS_FAILED = Counter(
    "vanity_jobs_failed",
    "Jobs that ended in failure.",
    registry=REGISTRY,
)
REQUESTS_REJECTED = Counter(
    "vanity_requests_rejected",
    "Requests rejected before reaching the job store.",
    ["reason"],
    registry=REGISTRY,
)
JOB_DURATION = Histogram(
    "vanity_job_duration_seconds",
    "Wall-clock time spent in the computation runner.",
    buckets=(0.1, 1, 5, 15, 60, 300, 900, 3600, float("inf")),
    registry=REGISTRY,
)


# ── Record helpers ──────────────────────────────────────────


def record_job_submitted() -> None:
    """Count a newly created job."""
    JOBS_SUBMITTED.inc()


def record_job_attached() -> None:
    """Count a request served by an existing job."""
    JOBS_ATTACHED.inc()


def record_request_rejected(reason: str) -> None:
    """Count a request rejected by validation or admission control."""
    REQUESTS_REJECTED.labels(reason=reason).inc()


def record_job_completed(
    *,
    success: bool,
    duration_s: float,
) -> None:
    """Record a job reaching a terminal state.

    Args:
        success: ``True`` if a result key was stored.
        duration_s: Time spent waiting on the runner, in seconds.
    """
    if success:
        JOBS_SUCCEEDED.inc()
    else:
        JOBS_FAILED.inc()
    JOB_DURATION.observe(duration_s)


# ── Live queue collector ────────────────────────────────────


class JobQueueCollector:
    """Expose the live queue state as gauges on each scrape."""

    def __init__(self) -> None:
        self._queue: JobQueue | None = None

    def bind(self, queue: JobQueue | None) -> None:
        """Point the collector at *queue* (``None`` to detach)."""
        self._queue = queue

    def collect(self):
        """Yield gauge families for queue depth, store size, activity."""
        depth = 0
        size = 0
        running = 0
        if self._queue is not None:
            depth = self._queue.pending_count
            size = self._queue.store_size
            running = int(self._queue.is_running)

        g_depth = GaugeMetricFamily(
            "vanity_queue_depth",
            "Jobs waiting for the worker.",
        )
        g_depth.add_metric([], depth)
        yield g_depth

        g_size = GaugeMetricFamily(
            "vanity_job_store_size",
            "Jobs held in the job store.",
        )
        g_size.add_metric([], size)
        yield g_size

        g_running = GaugeMetricFamily(
            "vanity_worker_running",
            "1 while the worker loop is draining the queue.",
        )
        g_running.add_metric([], running)
        yield g_running


QUEUE_COLLECTOR = JobQueueCollector()
REGISTRY.register(QUEUE_COLLECTOR)


def generate_metrics() -> bytes:
    """Render Prometheus exposition format for job metrics.

    Returns:
        UTF-8 bytes ready to be served on ``/metrics``.
    """
    return generate_latest(REGISTRY)
