"""
FastAPI entry point.

The application exposes:
* ``GET /v1/poll``          — submit or poll a mining request
* ``GET /v1/info``          — advertised name, demand and bit budget
* ``GET /v1/health``        — liveness probe
* ``GET /v1/health/worker`` — worker and queue status
* ``GET /v1/metrics``       — Prometheus metrics
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.api.deps import get_job_queue
from app.api.routes import health, poll
from app.core.config import get_settings, get_version
from app.core.metrics import REGISTRY
from app.core.middleware import RequestIDMiddleware
from app.logging_config import setup_logging

# ── Logging ─────────────────────────────────────────────────────────────────

settings = get_settings()
setup_logging(level=settings.LOG_LEVEL, json_format=not settings.DEBUG)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup / shutdown hooks."""
    logger.info(
        "Starting %s (max bits %d, miner %s)",
        settings.APP_NAME,
        settings.max_bits,
        settings.NANO_VANITY_COMMAND[0],
    )
    yield
    await get_job_queue().close()
    logger.info("Shutting down %s", settings.APP_NAME)


# ── App factory ─────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.APP_NAME,
    description="Deduplicating, poll-based vanity key work server.",
    version=get_version(),
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["X-Requested-With"],
)
app.add_middleware(RequestIDMiddleware)

# HTTP request metrics share the job metrics registry and /metrics route.
Instrumentator(
    registry=REGISTRY,
    excluded_handlers=[f"{settings.API_V1_STR}/metrics"],
).instrument(app)

app.include_router(poll.router, prefix=settings.API_V1_STR)
app.include_router(health.router, prefix=settings.API_V1_STR)
