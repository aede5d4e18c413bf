"""
Main application module for the quantity takeoff backend.

This file sets up the FastAPI application, configures CORS so a viewer
page served from another origin can call the API, and exposes a simple
health check endpoint.

Routers for scene registration and for the extraction endpoints are
included under the ``/api`` namespace.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_quantities import router as quantities_router
from .api.routes_scenes import router as scenes_router


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="Quantity takeoff")

    # Allow all origins by default.  In production you should restrict
    # this to the domains hosting the viewer.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(scenes_router, prefix="/api", tags=["scenes"])
    app.include_router(quantities_router, prefix="/api", tags=["quantities"])

    return app


# Uvicorn imports this when running `uvicorn qto.main:app` from within
# the backend directory.
app = create_app()
