"""
Pydantic models for API responses.

Every public model is re-exported from this ``__init__`` so that
``from app.schemas import PollResponse`` works.
"""

from app.schemas.health import HealthResponse, WorkerHealthResponse
from app.schemas.responses import InfoResponse, PollResponse

__all__ = [
    "HealthResponse",
    "InfoResponse",
    "PollResponse",
    "WorkerHealthResponse",
]
