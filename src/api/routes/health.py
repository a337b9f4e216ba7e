from __future__ import annotations

import time
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from src.core.config import get_settings
from src.infrastructure.db.session import get_session_factory

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database() -> dict:
    """Round-trip a trivial query against the credential store."""
    started = time.perf_counter()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        return {"status": "error", "message": str(exc)[:100]}
    return {"status": "ok", "latency_ms": round((time.perf_counter() - started) * 1000, 2)}


@router.get("/health", summary="Service health probe")
async def health_check() -> dict:
    """Report service metadata and whether the database answers."""
    settings = get_settings()
    database = await check_database()

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "status": "ok" if database["status"] == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"postgres": database},
    }
    await logger.ainfo("health_probe", status=payload["status"], database=database)
    return payload
