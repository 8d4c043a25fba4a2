"""
Request validation and admission control.

Every request passes through ``check_request`` before it may touch
the job store: the base key and prefix are checked against their
grammars and the prefix's bit cost against the configured budget.
The same checks run again in the worker loop before a queued job is
handed to the runner.
"""

from __future__ import annotations

from app.core.constants import (
    BASE_KEY_PATTERN,
    BITS_PER_CHARACTER,
    FIRST_CHARACTER_BITS,
    PREFIX_PATTERN,
    WILDCARD,
    WILDCARD_ALIASES,
)
from app.core.exceptions import BudgetExceeded, InvalidBaseKey, InvalidPrefix
from app.services.job_store import JobIdentity

_WILDCARDS = frozenset((WILDCARD, *WILDCARD_ALIASES))


def normalize_prefix(prefix: str) -> str:
    """Rewrite wildcard aliases (``*``) to the canonical ``.``."""
    for alias in WILDCARD_ALIASES:
        prefix = prefix.replace(alias, WILDCARD)
    return prefix


def validate_base_key(base_key: object) -> None:
    """Raise ``InvalidBaseKey`` unless *base_key* is 64 hex characters.

    Args:
        base_key: Caller-supplied value (may be ``None``).

    Raises:
        InvalidBaseKey: If the value is missing or malformed.
    """
    if not isinstance(base_key, str) or not BASE_KEY_PATTERN.match(base_key):
        raise InvalidBaseKey()


def validate_prefix(prefix: object) -> None:
    """Raise ``InvalidPrefix`` unless *prefix* is a normalized prefix.

    Args:
        prefix: Prefix after ``normalize_prefix``.

    Raises:
        InvalidPrefix: If the value is missing or malformed.
    """
    if not isinstance(prefix, str) or not PREFIX_PATTERN.match(prefix):
        raise InvalidPrefix()


def bit_cost(prefix: str) -> int:
    """Return how many bits *prefix* constrains.

    The first character only selects between two address forms, so
    fixing it costs ``FIRST_CHARACTER_BITS``; every later fixed
    character costs ``BITS_PER_CHARACTER``.  Wildcards are free.

    Args:
        prefix: Prefix pattern, normalized or not.

    Returns:
        Non-negative bit cost.
    """
    if not prefix:
        return 0
    bits = 0 if prefix[0] in _WILDCARDS else FIRST_CHARACTER_BITS
    for char in prefix[1:]:
        if char not in _WILDCARDS:
            bits += BITS_PER_CHARACTER
    return bits


def check_request(
    base_key: object,
    prefix: object,
    max_bits: int,
) -> JobIdentity:
    """Validate a request and derive its job identity.

    Args:
        base_key: Caller-supplied base public key.
        prefix: Caller-supplied prefix, wildcards in either form.
        max_bits: Largest accepted bit cost.

    Returns:
        The identity under which the job is stored.

    Raises:
        InvalidBaseKey: If the base key is malformed.
        InvalidPrefix: If the prefix is malformed.
        BudgetExceeded: If the prefix costs more than *max_bits*.
    """
    validate_base_key(base_key)
    if not isinstance(prefix, str):
        raise InvalidPrefix()
    normalized = normalize_prefix(prefix)
    validate_prefix(normalized)
    if bit_cost(normalized) > max_bits:
        raise BudgetExceeded()
    return JobIdentity(base_key=str(base_key), prefix=normalized)
