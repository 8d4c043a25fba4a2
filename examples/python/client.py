"""
Vanity Work Server — Python client example.

Demonstrates:
  1. Read the server's advertised bit budget.
  2. Poll a prefix until the mined key arrives.

Requirements:
  pip install httpx

Usage:
  python examples/python/client.py <basePublicKey> <prefix>
"""

from __future__ import annotations

import sys
import time
from typing import Any

import httpx

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

API_BASE = "http://localhost:8000/v1"
POLL_INTERVAL = 2  # seconds between status checks
POLL_TIMEOUT = 600  # give up after N seconds


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_info() -> dict[str, Any]:
    """GET /info and return the response dict."""
    resp = httpx.get(f"{API_BASE}/info", timeout=30)
    resp.raise_for_status()
    return resp.json()


def poll_until_done(base_public_key: str, prefix: str) -> dict[str, Any]:
    """Poll /poll until the body carries ``result`` or ``error``.

    The first poll also submits the request; repeating it is free.

    Args:
        base_public_key: 64-character hex public key to offset from.
        prefix: Address prefix, ``*`` or ``.`` for wildcards.

    Returns:
        The final response body.

    Raises:
        TimeoutError: If nothing arrives within ``POLL_TIMEOUT``.
    """
    params = {"basePublicKey": base_public_key, "prefix": prefix}
    deadline = time.monotonic() + POLL_TIMEOUT
    while time.monotonic() < deadline:
        resp = httpx.get(f"{API_BASE}/poll", params=params, timeout=30)
        resp.raise_for_status()
        body = resp.json()
        if "result" in body or "error" in body:
            return body
        print("  … still mining")
        time.sleep(POLL_INTERVAL)
    raise TimeoutError(f"No result for {prefix!r} after {POLL_TIMEOUT}s")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    if len(sys.argv) != 3:
        sys.exit(__doc__)
    base_public_key, prefix = sys.argv[1:]

    info = get_info()
    print(f"Server {info['name']!r} accepts up to {info['maxBits']} bits")

    body = poll_until_done(base_public_key, prefix)
    if "error" in body:
        sys.exit(f"Mining failed: {body['error']}")
    print(f"Private key offset: {body['result']}")


if __name__ == "__main__":
    main()
