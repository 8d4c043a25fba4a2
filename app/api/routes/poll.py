"""Mining routes (poll & info)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_job_queue
from app.core.config import Settings, get_settings
from app.schemas import InfoResponse, PollResponse
from app.services.job_queue import JobQueue

router = APIRouter(tags=["mining"])


@router.get(
    "/info",
    response_model=InfoResponse,
)
def info(settings: Settings = Depends(get_settings)) -> InfoResponse:
    """Advertise the worker's name, demand and bit budget."""
    return InfoResponse(
        name=settings.WORKER_NAME,
        demand=settings.WORKER_DEMAND,
        max_bits=settings.max_bits,
    )


@router.get(
    "/poll",
    response_model=PollResponse,
    response_model_exclude_none=True,
)
async def poll(
    base_public_key: str | None = Query(default=None, alias="basePublicKey"),
    prefix: str | None = Query(default=None),
    queue: JobQueue = Depends(get_job_queue),
) -> PollResponse:
    """Poll a mining request, submitting it on first sight.

    Repeated polls are free: identical requests share one job.
    The body is ``{}`` while mining, ``{"result": ...}`` once done,
    and ``{"error": ...}`` for rejected or failed requests.
    """
    # Must stay ``async``: the gate relies on running on the event loop.
    return PollResponse(**queue.get_status(base_public_key, prefix))
