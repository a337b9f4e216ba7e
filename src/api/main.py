from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from src.api.routes import register_routes
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.infrastructure.db.session import dispose_engine
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()


def _cors_options(settings: Settings) -> dict:
    if settings.is_local:
        # Credentials cannot be combined with a wildcard origin
        return {"allow_origins": ["*"], "allow_credentials": False}
    return {"allow_origins": list(settings.cors_origins), "allow_credentials": True}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the credential verification and trust score API."""
    settings = settings or get_settings()
    setup_logging()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await logger.ainfo(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
        )
        yield
        await dispose_engine()
        await logger.ainfo("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        **_cors_options(settings),
    )
    register_routes(app)

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid4())
        bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            await logger.ainfo(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
