"""Health check response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Returned by the health-check endpoint."""

    status: str = Field(
        ...,
        description="Service health status",
    )
    version: str = Field(
        ...,
        description="Application version",
    )


class WorkerHealthResponse(BaseModel):
    """Returned by the worker health-check endpoint."""

    status: str = Field(
        ...,
        description="``busy`` while mining, ``idle`` otherwise",
    )
    queue_depth: int = Field(
        ...,
        description="Jobs waiting for the worker",
    )
    store_size: int = Field(
        ...,
        description="Jobs held in the job store",
    )
