"""FastAPI application entrypoint and configuration.

This module provides the main FastAPI application factory that sets up
logging, CORS middleware, the object store, the error handlers and the API
routers for uploads and published maps, and exposes a health check endpoint.

Example:
    The application can be run with uvicorn:
        $ uvicorn pmtiles_publisher.main:app --reload

    Or through the installed console script, which reads HOST and PORT
    from the settings:
        $ pmtiles-publisher
"""

import fastapi
import uvicorn
from fastapi.middleware import cors

from pmtiles_publisher.api import errors, maps, uploads
from pmtiles_publisher.core import config
from pmtiles_publisher.core import logging as app_logging
from pmtiles_publisher.storage import object_store


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    The object store is built here, once per application, and shared by
    every request through app.state. Bucket and region therefore come from
    the settings loaded at startup.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    app_logging.configure_logging(settings)

    app = fastapi.FastAPI(title="PMTiles Publisher", version="0.1.0")
    app.state.object_store = object_store.get_object_store(settings)

    app.include_router(uploads.router)
    app.include_router(maps.router)
    errors.register_exception_handlers(app)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    settings = config.get_settings()
    uvicorn.run(
        "pmtiles_publisher.main:app",
        host=settings.host,
        port=settings.port,
    )
