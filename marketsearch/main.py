"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers.
No business logic here. See marketsearch.core.lifespan and
marketsearch.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketsearch.api.v1 import api_router
from marketsearch.core.config import get_settings
from marketsearch.core.exception_handlers import register_exception_handlers
from marketsearch.core.lifespan import create_lifespan
from marketsearch.middleware import ClientAddressMiddleware
from marketsearch.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    # Middleware: last added is outermost. Order: client address -> CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(ClientAddressMiddleware)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
