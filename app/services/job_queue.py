"""
Deduplicating job queue with a single sequential worker.

``JobQueue.submit_or_attach`` is the submission gate: it validates a
request, then either returns the job already held for its identity
or creates a pending job, appends it to the FIFO queue and wakes the
worker.  ``JobQueue.get_status`` is the same operation projected
onto the poll wire format, so polling is also how work is submitted.

**Concurrency model**

Everything runs on one asyncio event loop.  The gate never awaits,
so its check-create-enqueue-start sequence cannot interleave with
another submission or with the worker.  The worker suspends only
while awaiting the runner, and at most one worker task exists at a
time: the ``_running`` flag is set in the same synchronous step that
schedules it and cleared in the same step that sees the queue empty.
Callers must therefore invoke the gate from the event loop thread
(``async def`` route handlers), never from a thread pool.
"""

from __future__ import annotations

import asyncio
import contextlib
import contextvars
import logging
import time
from collections import deque
from typing import Any

from app.core.constants import MSG_INVALID_QUEUED_REQUEST, MSG_MINING_FAILED
from app.core.exceptions import (
    ComputationError,
    RequestValidationError,
)
from app.core.metrics import (
    record_job_attached,
    record_job_completed,
    record_job_submitted,
    record_request_rejected,
)
from app.services.job_store import Job, JobIdentity, JobStore
from app.services.runner import ComputationRunner
from app.services.validator import check_request, validate_base_key, validate_prefix

logger = logging.getLogger(__name__)


class JobQueue:
    """Submission gate, FIFO pending queue and worker loop."""

    def __init__(
        self,
        runner: ComputationRunner,
        *,
        max_bits: int,
        store: JobStore | None = None,
    ) -> None:
        self._runner = runner
        self._max_bits = max_bits
        self._store = store if store is not None else JobStore()
        self._pending: deque[JobIdentity] = deque()
        self._running = False
        self._worker: asyncio.Task[None] | None = None

    # ── Introspection ───────────────────────────────────────

    @property
    def max_bits(self) -> int:
        return self._max_bits

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def store_size(self) -> int:
        return len(self._store)

    @property
    def is_running(self) -> bool:
        return self._running

    def get_job(self, identity: JobIdentity) -> Job | None:
        return self._store.get(identity)

    # ── Submission gate ─────────────────────────────────────

    def submit_or_attach(self, base_key: str | None, prefix: str | None) -> Job:
        """Return the job for a request, creating and queueing it if new.

        Args:
            base_key: Caller-supplied base public key.
            prefix: Caller-supplied prefix; ``*`` and ``.`` are both
                wildcards.

        Returns:
            The job for the request's identity, in whatever state
            it currently holds.

        Raises:
            RequestValidationError: If the request is malformed or
                over budget.  Nothing is created or queued.
        """
        try:
            identity = check_request(base_key, prefix, self._max_bits)
        except RequestValidationError as exc:
            record_request_rejected(exc.reason)
            raise

        job = self._store.get(identity)
        if job is not None:
            record_job_attached()
            return job

        job = self._store.create(identity)
        self._pending.append(identity)
        record_job_submitted()
        logger.info(
            "Queued job for prefix %s (queue depth %d)",
            identity.prefix,
            len(self._pending),
        )
        self._ensure_worker()
        return job

    def get_status(self, base_key: str | None, prefix: str | None) -> dict[str, Any]:
        """Poll a request, submitting it first if it is new.

        Returns:
            ``{}`` while pending, ``{"result": ...}`` or
            ``{"error": ...}`` once finished, and ``{"error": ...}``
            immediately for an invalid request.
        """
        try:
            job = self.submit_or_attach(base_key, prefix)
        except RequestValidationError as exc:
            return {"error": str(exc)}
        return job.to_response()

    # ── Worker loop ─────────────────────────────────────────

    def _ensure_worker(self) -> None:
        if self._running:
            return
        # Fresh context: worker logs must not carry the submitting
        # request's ID.
        self._worker = asyncio.get_running_loop().create_task(
            self._drain(),
            name="job-queue-worker",
            context=contextvars.Context(),
        )
        self._running = True

    async def _drain(self) -> None:
        """Run queued jobs one at a time until the queue is empty."""
        logger.debug("Worker started")
        try:
            while self._pending:
                identity = self._pending.popleft()
                try:
                    await self._process(identity)
                except Exception:
                    logger.exception("Worker failed on %s; continuing", identity)
        finally:
            self._running = False
            logger.debug("Worker idle")

    async def _process(self, identity: JobIdentity) -> None:
        try:
            validate_base_key(identity.base_key)
            validate_prefix(identity.prefix)
        except RequestValidationError:
            logger.error("Queued request failed validation: %s", identity)
            self._store.fail(identity, MSG_INVALID_QUEUED_REQUEST)
            return

        started = time.monotonic()
        try:
            result = await self._runner.run(identity.base_key, identity.prefix)
        except ComputationError as exc:
            logger.error("Mining failed for %s: %s", identity, exc)
            self._finish(identity, None, started)
        except Exception:
            logger.exception("Unexpected runner error for %s", identity)
            self._finish(identity, None, started)
        else:
            self._finish(identity, result, started)

    def _finish(
        self,
        identity: JobIdentity,
        result: str | None,
        started: float,
    ) -> None:
        duration = time.monotonic() - started
        if result is None:
            self._store.fail(identity, MSG_MINING_FAILED)
        else:
            self._store.complete(identity, result)
            logger.info(
                "Job for prefix %s completed in %.1fs",
                identity.prefix,
                duration,
            )
        record_job_completed(success=result is not None, duration_s=duration)

    async def join(self) -> None:
        """Wait until the worker has drained the queue."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    async def close(self) -> None:
        """Stop the worker, killing any computation in flight.

        Called on application shutdown.  Interrupted and queued jobs
        stay pending; the store does not outlive the process.
        """
        worker = self._worker
        if worker is None or worker.done():
            return
        logger.info(
            "Stopping worker with %d queued job(s)",
            len(self._pending),
        )
        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker
