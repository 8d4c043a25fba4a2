"""
Exception hierarchy for the work server.

Validation errors carry the public message shown to callers and are
raised synchronously by the submission gate.  Computation errors are
raised by runners and absorbed by the worker loop, which records a
failed job and logs the detail for operators.
"""

from __future__ import annotations

from app.core.constants import (
    MSG_BUDGET_EXCEEDED,
    MSG_INVALID_BASE_KEY,
    MSG_INVALID_PREFIX,
)


class VanityServerError(Exception):
    """Base class for all application errors."""


# ── Request validation ──────────────────────────────────────


class RequestValidationError(VanityServerError):
    """A request was rejected before reaching the job store."""

    public_message: str = "Invalid request"
    reason: str = "invalid"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class InvalidBaseKey(RequestValidationError):
    """The base public key is not a 64-character hex string."""

    public_message = MSG_INVALID_BASE_KEY
    reason = "invalid_base_key"


class InvalidPrefix(RequestValidationError):
    """The prefix does not match the address-prefix grammar."""

    public_message = MSG_INVALID_PREFIX
    reason = "invalid_prefix"


class BudgetExceeded(RequestValidationError):
    """The prefix constrains more bits than the server accepts."""

    public_message = MSG_BUDGET_EXCEEDED
    reason = "budget_exceeded"


# ── Computation ─────────────────────────────────────────────


class ComputationError(VanityServerError):
    """The computation runner did not produce a usable key."""


class ComputationFailed(ComputationError):
    """The runner exited abnormally or printed no valid key."""


class LaunchFailed(ComputationError):
    """The runner process could not be started."""


# ── Job store ───────────────────────────────────────────────


class JobStateError(VanityServerError):
    """An illegal job transition was attempted."""
