"""
Main FastAPI application entry point.
Configures the app, middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
import logging
from typing import Dict, Any, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from claimflow.application.use_cases.ai_use_cases import (
    BATCH_ANALYSIS_JOB, BatchAnalysisHandler, ClaimAnalyzer
)
from claimflow.config import Settings, get_settings
from claimflow.infrastructure.container import ServiceContainer
from claimflow.infrastructure.rate_limiting.dependencies import api_rate_limit
from claimflow.infrastructure.web.middleware.error_handler import (
    ErrorHandlerMiddleware, ErrorTranslator, register_exception_handlers
)
from claimflow.infrastructure.web.routers import (
    auth,
    claims,
    ai,
    notifications,
    users,
    files,
    webhooks,
    realtime,
)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry when a DSN is configured outside development."""
    if not settings.sentry_dsn or settings.is_development:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        environment=settings.environment,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
    )
    logger.info("Sentry initialized")


def register_job_handlers(container: ServiceContainer) -> None:
    claim_analyzer = ClaimAnalyzer(container.analyzer, container.cache, container.settings.ai_cache_ttl_seconds)
    container.worker.register(BATCH_ANALYSIS_JOB, BatchAnalysisHandler(container.database, claim_analyzer))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.
    Setup and teardown operations.
    """
    container: ServiceContainer = app.state.container
    settings = container.settings

    # Startup
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.is_production:
        settings.validate_environment()

    init_sentry(settings)

    if settings.auto_create_tables:
        container.database.create_tables()

    container.job_queue.requeue_interrupted()
    if settings.job_worker_enabled:
        container.worker.start()

    yield

    # Shutdown
    logger.info("Shutting down application")
    await container.close()


def create_application(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    settings = settings or (container.settings if container else get_settings())
    configure_logging(settings)

    container = container or ServiceContainer(settings)
    register_job_handlers(container)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        debug=settings.debug,
        docs_url=f"{settings.api_prefix}/docs" if settings.debug else None,
        redoc_url=f"{settings.api_prefix}/redoc" if settings.debug else None,
        openapi_url=f"{settings.api_prefix}/openapi.json" if settings.debug else None,
        lifespan=lifespan
    )
    app.state.container = container

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add trusted host middleware for production
    if settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["*"]  # Configure with your domain
        )

    # Add custom error handler middleware
    translator = ErrorTranslator(settings)
    app.add_middleware(ErrorHandlerMiddleware, translator=translator)
    register_exception_handlers(app, translator)

    # Include routers
    api_limit = [Depends(api_rate_limit)]
    app.include_router(
        auth.router,
        prefix=f"{settings.api_prefix}/auth",
        tags=["Authentication"],
        dependencies=api_limit
    )
    app.include_router(
        claims.router,
        prefix=f"{settings.api_prefix}/claims",
        tags=["Claims"],
        dependencies=api_limit
    )
    app.include_router(
        ai.router,
        prefix=f"{settings.api_prefix}/ai",
        tags=["Denial Analysis"],
        dependencies=api_limit
    )
    app.include_router(
        notifications.router,
        prefix=f"{settings.api_prefix}/notifications",
        tags=["Notifications"],
        dependencies=api_limit
    )
    app.include_router(
        users.router,
        prefix=f"{settings.api_prefix}/users",
        tags=["Users"],
        dependencies=api_limit
    )
    app.include_router(
        files.router,
        prefix=f"{settings.api_prefix}/files",
        tags=["Files"],
        dependencies=api_limit
    )
    app.include_router(
        webhooks.router,
        prefix=f"{settings.api_prefix}/webhooks",
        tags=["Webhooks"],
        dependencies=api_limit
    )
    app.include_router(
        realtime.router,
        prefix=settings.api_prefix,
        tags=["Realtime"]
    )

    # Root endpoint
    @app.get("/", dependencies=api_limit)
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "success": True,
            "data": {
                "name": settings.api_title,
                "version": settings.api_version,
                "environment": settings.environment,
                "docs": f"{settings.api_prefix}/docs" if settings.debug else None,
                "health": f"{settings.api_prefix}/health"
            }
        }

    # Health check endpoint
    @app.get(f"{settings.api_prefix}/health", dependencies=api_limit)
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint for monitoring."""
        try:
            store_ok = await container.store.ping()
        except Exception as e:
            logger.warning(f"Key-value store health check failed: {e}")
            store_ok = False

        return {
            "success": True,
            "data": {
                "status": "healthy" if store_ok else "degraded",
                "environment": settings.environment,
                "version": settings.api_version,
                "keyValueStore": "up" if store_ok else "down"
            }
        }

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "claimflow.main:create_application",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )
