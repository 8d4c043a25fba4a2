"""
Centralised constants used across the application.

Keeping patterns and caller-facing messages in one place makes it
easy to keep the wire contract stable and keeps ``grep`` useful
when debugging.
"""

from __future__ import annotations

import re

# ── Input grammar ───────────────────────────────────────────────────────────

BASE_KEY_PATTERN: re.Pattern[str] = re.compile(r"^[0-9a-fA-F]{64}$")
"""A base public key (and a mined result key): 32 bytes as hex."""

PREFIX_PATTERN: re.Pattern[str] = re.compile(
    r"^[13.][13456789abcdefghijkmnopqrstuwxyz.]{0,59}$",
)
"""A normalized address prefix; ``.`` marks a wildcard position."""

WILDCARD: str = "."
"""Canonical wildcard glyph stored in job identities."""

WILDCARD_ALIASES: tuple[str, ...] = ("*",)
"""Glyphs accepted from callers and rewritten to ``WILDCARD``."""


# ── Bit cost weights ────────────────────────────────────────────────────────

FIRST_CHARACTER_BITS: int = 1
"""Cost of fixing the first prefix character (``1`` or ``3``)."""

BITS_PER_CHARACTER: int = 32
"""Cost of fixing any later prefix character."""


# ── Caller-facing messages ──────────────────────────────────────────────────
# Callers only ever see these strings; runner diagnostics go to the
# log instead.

MSG_INVALID_BASE_KEY: str = "Invalid basePublicKey"
MSG_INVALID_PREFIX: str = "Invalid prefix"
MSG_BUDGET_EXCEEDED: str = "Too many bits in prefix"
MSG_MINING_FAILED: str = "Internal mining error"
MSG_INVALID_QUEUED_REQUEST: str = "Invalid request"


# ── Runner invocation ───────────────────────────────────────────────────────

RUNNER_OUTPUT_FLAG: str = "--simple-output"
RUNNER_OFFSET_FLAG: str = "--public-offset"
