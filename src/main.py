"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from api.dependencies.services import (
    clear_dependency_caches,
    get_connection_monitor,
    get_firebase,
    get_history_service,
)
from api.exception_handlers import setup_exception_handlers
from api.middleware.request_context import RequestContextMiddleware
from api.routes.health import VERSION
from api.routes.health import router as health_router
from api.routes.history import router as history_router
from api.routes.users import router as users_router
from core.config import settings
from core.logging import setup_logging
from infrastructure.firebase import shutdown_firebase

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    firebase = get_firebase()
    logger.info(
        "startup",
        identity_provider=firebase.identity_initialized,
        document_store=firebase.document_store_initialized,
        firebase_api_key_present=settings.firebase_api_key_present,
        firebase_api_key_valid=settings.firebase_api_key_valid,
    )

    monitor = get_connection_monitor()
    history_service = get_history_service()

    async def flush_history() -> None:
        written = await history_service.flush()
        if written:
            logger.info("history_flush_on_connect", written=written)

    monitor.add_listener(flush_history)
    monitor.start()

    try:
        yield
    finally:
        monitor.remove_listener(flush_history)
        await monitor.stop()
        shutdown_firebase(firebase)
        # Cached handles point at the deleted Firebase app
        clear_dependency_caches()
        logger.info("shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Accounts and lookup history\n\n"
            "Registers and authenticates users against a managed identity "
            "provider, stores profiles in whichever store is reachable, and "
            "records per-user word lookups.\n\n"
            "### Degraded mode\n"
            "When a backend is missing the API keeps answering from the next "
            "one available. Responses served that way carry "
            "`serverFallback: true`; history written while the database is "
            "down is returned with `buffered: true` and stored once it is back."
        ),
        version=VERSION,
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "users",
                "description": "Registration, login and profile operations",
            },
            {
                "name": "history",
                "description": "Lookup history operations",
            },
        ],
    )

    # Request tracking
    app.add_middleware(RequestContextMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(history_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
