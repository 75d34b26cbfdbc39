"""Main application entrypoint for ShortWave Launchpad."""

from fastapi import FastAPI, status

from shortwave.api.v1 import routes_health
from shortwave.api.v1.routes_credentials import router as credentials_router
from shortwave.api.v1.routes_ui import ui_router
from shortwave.api.v1.routes_upload import router as upload_router
from shortwave.api.v1.routes_upload import upload_method_not_allowed
from shortwave.core.config import settings
from shortwave.core.logging import setup_logging
from shortwave.core.middleware import HTTPErrorLoggingMiddleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    app.add_middleware(HTTPErrorLoggingMiddleware)
    app.add_exception_handler(status.HTTP_405_METHOD_NOT_ALLOWED, upload_method_not_allowed)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(upload_router)
    app.include_router(credentials_router)
    app.include_router(ui_router)

    return app


# Export app instance for ASGI servers
app = create_app()
