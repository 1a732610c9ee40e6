"""FastAPI application entrypoint — lifespan, routers, middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text

from fieldsense.config import get_settings
from fieldsense.context import build_engine_context
from fieldsense.database import async_session_factory, engine
from fieldsense.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from fieldsense.routes import crops, fields, gdd, irrigation, readings, weather

logger = structlog.get_logger("fieldsense")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Verify the database connection
      3. Connect to Redis (forecast cache)
      4. Build the engine context shared by every request

    Shutdown:
      1. Close Redis connection pool
      2. Dispose SQLAlchemy engine
    """
    configure_structured_logging()
    settings = get_settings()
    logger.info("fieldsense_starting", log_level=settings.log_level)

    redis: Redis | None = None
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))

        redis = Redis.from_url(settings.redis_url, decode_responses=True)
        await redis.ping()
        app.state.redis = redis
        app.state.engine_context = build_engine_context(async_session_factory, redis, settings)
    except Exception as exc:
        logger.exception("startup_failure", error=str(exc))
        raise

    yield

    logger.info("fieldsense_shutting_down")
    if redis is not None:
        await redis.aclose()
    await engine.dispose()


app = FastAPI(
    title="FieldSense API",
    description=(
        "Agronomic decision engine — calibrates buried soil-sensor readings and "
        "derives irrigation urgency, growing-degree-day growth stages and crop "
        "suitability rankings."
    ),
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── Middleware ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health checks ───────────────────────────────────────────────────────────
async def _run_readiness_checks(app: FastAPI) -> dict[str, dict[str, Any]]:
    checks: dict[str, dict[str, Any]] = {}
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
        checks["database"] = {"ok": True, "message": "ok"}
    except Exception as exc:
        checks["database"] = {"ok": False, "message": str(exc)}

    redis = getattr(app.state, "redis", None)
    if redis is None:
        checks["redis"] = {"ok": False, "message": "redis client not initialised"}
    else:
        try:
            await redis.ping()
            checks["redis"] = {"ok": True, "message": "ok"}
        except Exception as exc:
            checks["redis"] = {"ok": False, "message": str(exc)}
    return checks


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Basic health check — verifies the API process is alive."""
    return {
        "status": "ok",
        "service": "fieldsense",
        "version": VERSION,
    }


@app.get("/health/ready", tags=["system"])
async def readiness_check() -> JSONResponse:
    """Dependency readiness — 503 when the database or Redis is unreachable."""
    checks = await _run_readiness_checks(app)
    ready = all(check["ok"] for check in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ok" if ready else "degraded", "checks": checks},
    )


# ── Router registration ────────────────────────────────────────────────────
app.include_router(fields.router, prefix="/api/v1")
app.include_router(readings.router, prefix="/api/v1")
app.include_router(irrigation.router, prefix="/api/v1")
app.include_router(crops.router, prefix="/api/v1")
app.include_router(gdd.router, prefix="/api/v1")
app.include_router(weather.router, prefix="/api/v1")
