"""
FastAPI dependency-injection helpers.

Provides the process-wide ``JobQueue`` built from settings.  Tests
swap it out via ``app.dependency_overrides[get_job_queue]``.
"""

from __future__ import annotations

from functools import lru_cache

from app.core.config import get_settings
from app.core.metrics import QUEUE_COLLECTOR
from app.services.job_queue import JobQueue
from app.services.job_store import JobStore
from app.services.runner import NanoVanityRunner


@lru_cache
def get_job_queue() -> JobQueue:
    """Return the job queue singleton.

    There is exactly one queue (and so one worker) per process.

    Returns:
        A ``JobQueue`` wired to the configured miner command.
    """
    settings = get_settings()
    queue = JobQueue(
        NanoVanityRunner(
            settings.NANO_VANITY_COMMAND,
            timeout=settings.RUNNER_TIMEOUT,
        ),
        max_bits=settings.max_bits,
        store=JobStore(max_entries=settings.JOB_STORE_MAX_ENTRIES),
    )
    QUEUE_COLLECTOR.bind(queue)
    return queue
