"""
FastAPI Application

Main entry point for the Warehouse Analytics API.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from warehouse_analytics.config import get_settings
from warehouse_analytics.config.logging import configure_logging
from warehouse_analytics.database.connection import close_database, init_database
from warehouse_analytics.serving.api.middleware import RequestLoggingMiddleware
from warehouse_analytics.serving.api.routes import (
    analytics_router,
    exploration_router,
    health_router,
    reports_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Warehouse Analytics API")

    try:
        await init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.warning("Database init failed", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()


def create_app() -> FastAPI:
    """Build the API application with middleware and routes."""
    settings = get_settings()

    # Interactive docs are not served in production
    docs = not settings.is_production

    app = FastAPI(
        title="Warehouse Analytics API",
        description="Reporting API over the sales analytics warehouse",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(exploration_router, prefix="/api/v1/exploration", tags=["Exploration"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Warehouse Analytics API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": app.docs_url,
        }

    return app


app = create_app()
