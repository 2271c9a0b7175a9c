"""
Main application module for the spline backend.

This file sets up the FastAPI application, configures CORS so the
editor frontend can make cross-origin requests, and exposes a simple
health check endpoint.

The spline router is included under the `/api` namespace.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_splines import router as splines_router
from .services.spline_registry import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="Spline service")

    # Resolve settings (including environment overrides) once at startup
    # so a bad override fails fast instead of on the first request.
    @app.on_event("startup")  # type: ignore[misc]
    async def startup_event() -> None:
        settings = get_settings()
        logger.info(
            "Spline settings: index_resolution=%d closest_point_resolution=%d search_step=%g",
            settings.index_resolution,
            settings.closest_point_resolution,
            settings.index_search_step,
        )

    # Allow all origins by default.  In production you should restrict
    # this to the domains that are allowed to access your API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint for monitoring and deployment probes.
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(splines_router, prefix="/api", tags=["splines"])

    return app


# Create the application instance.  Uvicorn will import this when
# running `uvicorn splines.main:app` from within the backend directory.
app = create_app()
