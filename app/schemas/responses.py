"""Response models for the poll and info endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PollResponse(BaseModel):
    """Returned when polling a request.

    Empty while the job is pending; exactly one of ``result`` or
    ``error`` is set once it has finished or the request was
    rejected.  Unset fields are left out of the JSON body.
    """

    result: str | None = Field(
        default=None,
        description="Mined private key (hex), once completed",
    )
    error: str | None = Field(
        default=None,
        description="Error message for a rejected or failed request",
    )


class InfoResponse(BaseModel):
    """Static capability metadata advertised to clients."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        ...,
        description="Human-readable worker name",
    )
    demand: str = Field(
        ...,
        description="Current demand indicator",
    )
    max_bits: int = Field(
        ...,
        alias="maxBits",
        description="Largest prefix bit cost accepted",
    )
