"""Shared pytest fixtures for the work server test suite."""

from __future__ import annotations

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_job_queue
from app.main import app
from app.services.job_queue import JobQueue

BASE_KEY = "0123456789abcdef" * 4
RESULT_KEY = "deadbeef" * 8
OTHER_RESULT_KEY = "c0ffee00" * 8

#: Budget for three fixed characters after the first: ``1abc``.
TEST_MAX_BITS = 1 + 3 * 32


# ── Fake computation runner ────────────────────────────────────────────────


class FakeRunner:
    """Stand-in for ``NanoVanityRunner`` that records invocations.

    Outcomes are looked up by prefix; an ``Exception`` instance is
    raised instead of returned.  Clear ``gate`` to hold every run
    until the test sets it again.
    """

    def __init__(
        self,
        outcomes: dict[str, str | Exception] | None = None,
        default: str | Exception = RESULT_KEY,
    ) -> None:
        self.outcomes = outcomes or {}
        self.default = default
        self.calls: list[tuple[str, str]] = []
        self.gate = asyncio.Event()
        self.gate.set()

    async def run(self, base_key: str, prefix: str) -> str:
        self.calls.append((base_key, prefix))
        await self.gate.wait()
        outcome = self.outcomes.get(prefix, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def runner() -> FakeRunner:
    """Return a runner that succeeds with ``RESULT_KEY``."""
    return FakeRunner()


@pytest.fixture
def queue(runner: FakeRunner) -> JobQueue:
    """Return a fresh job queue backed by the fake runner."""
    return JobQueue(runner, max_bits=TEST_MAX_BITS)


# ── HTTP client ─────────────────────────────────────────────────────────────


@pytest.fixture
async def client(queue: JobQueue) -> AsyncClient:  # type: ignore[misc]
    """
    Yield an async HTTP client bound to the FastAPI app.

    The app's job queue is replaced by the ``queue`` fixture.

    Usage::

        async def test_something(client: AsyncClient):
            response = await client.get("/v1/health")
    """
    app.dependency_overrides[get_job_queue] = lambda: queue
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(
            transport=transport,
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
