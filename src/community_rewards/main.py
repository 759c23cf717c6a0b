"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from community_rewards import __version__
from community_rewards.api.v1 import api_router
from community_rewards.core.config import Settings, get_settings
from community_rewards.core.errors import RedemptionError
from community_rewards.core.logging import configure_logging
from community_rewards.infrastructure.database import Database
from community_rewards.services.auth import JWTService
from community_rewards.services.notifications import (
    NotificationService,
    build_notification_service,
)
from community_rewards.services.redemption import RedemptionEngine
from community_rewards.services.rewards import RewardCatalogService

logger = logging.getLogger(__name__)


def install_services(
    app: FastAPI,
    database: Database,
    notifier: NotificationService,
) -> None:
    """Attach the database and the services built on it to app.state."""
    settings: Settings = app.state.settings
    app.state.database = database
    app.state.notifier = notifier
    app.state.redemption_engine = RedemptionEngine(database, notifier, settings=settings)
    app.state.catalog_service = RewardCatalogService(database)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup/shutdown events."""
    # Startup
    settings: Settings = app.state.settings
    configure_logging(settings)

    owned_database = None
    if getattr(app.state, "database", None) is None:
        owned_database = Database.from_settings(settings)
        owned_database.open()
        install_services(
            app,
            owned_database,
            build_notification_service(settings, owned_database),
        )
    logger.info(f"{settings.app_name} {__version__} started ({settings.environment})")

    yield

    # Shutdown
    if owned_database is not None:
        await app.state.notifier.close()
        await owned_database.close()
        app.state.database = None
    logger.info(f"{settings.app_name} stopped")


async def redemption_error_handler(request: Request, exc: RedemptionError) -> JSONResponse:
    """Render a RedemptionError as a JSON error body."""
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.kind.value}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    notifier: NotificationService | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    When a database is passed in, the caller owns its lifecycle and the
    services are installed right away; otherwise the lifespan opens one from
    settings and closes it on shutdown.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Community rewards redemption API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.jwt_service = JWTService(settings=settings)

    if database is not None:
        install_services(
            app,
            database,
            notifier or build_notification_service(settings, database),
        )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RedemptionError, redemption_error_handler)

    # Register routes
    register_routes(app, settings)

    return app


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register all application routes."""
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


# Create application instance
app = create_app()
