"""Health-check routes (liveness, worker status, metrics)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.deps import get_job_queue
from app.core.config import get_version
from app.core.metrics import generate_metrics
from app.schemas import HealthResponse, WorkerHealthResponse
from app.services.job_queue import JobQueue

router = APIRouter(tags=["health"])

_version = get_version()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness probe — returns OK if the web process is running."""
    return HealthResponse(status="ok", version=_version)


@router.get(
    "/health/worker",
    response_model=WorkerHealthResponse,
)
async def worker_health_check(
    queue: JobQueue = Depends(get_job_queue),
) -> WorkerHealthResponse:
    """Report whether the worker is mining and how much is queued."""
    return WorkerHealthResponse(
        status="busy" if queue.is_running else "idle",
        queue_depth=queue.pending_count,
        store_size=queue.store_size,
    )


@router.get(
    "/metrics",
    tags=["observability"],
)
def prometheus_metrics() -> Response:
    """Expose job metrics in Prometheus exposition format."""
    return Response(
        content=generate_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
