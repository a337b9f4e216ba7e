from fastapi import FastAPI

from . import admin, health, trust, verifications


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(admin.router)
    app.include_router(verifications.router)
    app.include_router(trust.router)
