"""
In-memory job store.

Maps a ``JobIdentity`` (base key, normalized prefix) to the ``Job``
computing it.  The store is the single source of truth read by
pollers and written by the worker loop.

**Lifecycle**

A job is created ``PENDING`` the first time its identity is seen and
moves exactly once to ``COMPLETED`` or ``FAILED``.  Terminal jobs
never change again; attempting to do so raises ``JobStateError``.

**Retention**

By default entries live for the whole process lifetime, so a
finished result is served to every later poller for free.  When
``max_entries`` is set, inserting past the bound evicts the least
recently polled *terminal* job.  Pending jobs are never evicted,
which keeps each resident identity computed at most once.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, NamedTuple

from app.core.exceptions import JobStateError

logger = logging.getLogger(__name__)


class JobIdentity(NamedTuple):
    """Request identity: the pair itself, never a concatenation."""

    base_key: str
    prefix: str


class JobState(StrEnum):
    """Possible states of a mining job."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    """A single deduplicated mining job."""

    identity: JobIdentity
    state: JobState = JobState.PENDING
    result: str | None = None
    error: str | None = None
    created_at: float = field(default_factory=time.time)
    finished_at: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state is not JobState.PENDING

    def to_response(self) -> dict[str, Any]:
        """Project the job onto the poll wire format.

        Returns:
            ``{}`` while pending, ``{"result": key}`` once completed,
            ``{"error": message}`` once failed.
        """
        if self.state is JobState.COMPLETED:
            return {"result": self.result}
        if self.state is JobState.FAILED:
            return {"error": self.error}
        return {}


class JobStore:
    """Identity → job mapping with optional terminal-entry eviction."""

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._jobs: OrderedDict[JobIdentity, Job] = OrderedDict()

    def __contains__(self, identity: object) -> bool:
        return identity in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def get(self, identity: JobIdentity) -> Job | None:
        """Return the job for *identity* and mark it recently polled."""
        job = self._jobs.get(identity)
        if job is not None:
            self._jobs.move_to_end(identity)
        return job

    def create(self, identity: JobIdentity) -> Job:
        """Insert a fresh pending job.

        Args:
            identity: Identity not yet present in the store.

        Returns:
            The new ``PENDING`` job.

        Raises:
            JobStateError: If a job already exists for *identity*.
        """
        if identity in self._jobs:
            raise JobStateError(f"Job already exists for {identity}")
        job = Job(identity=identity)
        self._jobs[identity] = job
        self._evict()
        return job

    def complete(self, identity: JobIdentity, result: str) -> Job:
        """Move a pending job to ``COMPLETED`` with *result*."""
        job = self._pending(identity)
        job.state = JobState.COMPLETED
        job.result = result
        job.finished_at = time.time()
        return job

    def fail(self, identity: JobIdentity, error: str) -> Job:
        """Move a pending job to ``FAILED`` with *error*."""
        job = self._pending(identity)
        job.state = JobState.FAILED
        job.error = error
        job.finished_at = time.time()
        return job

    def _pending(self, identity: JobIdentity) -> Job:
        job = self._jobs.get(identity)
        if job is None:
            raise JobStateError(f"No job for {identity}")
        if job.is_terminal:
            raise JobStateError(
                f"Job for {identity} is already {job.state}",
            )
        return job

    def _evict(self) -> None:
        """Drop least recently polled terminal jobs above the bound."""
        if self._max_entries is None:
            return
        excess = len(self._jobs) - self._max_entries
        if excess <= 0:
            return
        victims = [
            identity for identity, job in self._jobs.items() if job.is_terminal
        ][:excess]
        for identity in victims:
            del self._jobs[identity]
        if victims:
            logger.debug("Evicted %d finished job(s)", len(victims))
        if len(self._jobs) > self._max_entries:
            # Only pending jobs remain; they must finish before they go.
            logger.warning(
                "Job store holds %d entries, above bound %d",
                len(self._jobs),
                self._max_entries,
            )
