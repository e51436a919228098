# 📄 File: patient_api/main.py
#
# 🧭 Purpose (Layman Explanation):
# The main control center that starts the consultation service, connects all its parts
# together and makes sure everything is ready to handle requests from the websites.
#
# 🧪 Purpose (Technical Summary):
# FastAPI application factory and entry point with middleware setup, exception handlers,
# rate limiter wiring, repository bindings, router registration and database lifecycle.
#
# 🔗 Dependencies:
# - FastAPI framework, uvicorn, slowapi
# - patient_api.shared.config.settings
# - patient_api.shared.infrastructure.database (connection and session managers)
# - Module routers and repository implementations
#
# 🔄 Connected Modules / Calls From:
# - uvicorn server startup
# - Docker container entry point
# - Test suite (create_application)

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Response
from slowapi.errors import RateLimitExceeded

from patient_api.api import API_PREFIX, CURRENT_VERSION
from patient_api.api.middleware.cors import setup_cors
from patient_api.api.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
from patient_api.api.middleware.logging import RequestLoggingMiddleware
from patient_api.api.v1 import API_TAGS
from patient_api.api.v1.router import api_v1_router
from patient_api.modules.consultation.domain.repositories.response_repository import ResponseRepository
from patient_api.modules.consultation.infrastructure.database.response_repository_impl import ResponseRepositoryImpl
from patient_api.modules.payments.domain.repositories.subscription_repository import (
    SubscriptionRepository,
    WebhookEventRepository,
)
from patient_api.modules.payments.infrastructure.database.subscription_repository_impl import (
    SubscriptionRepositoryImpl,
    WebhookEventRepositoryImpl,
)
from patient_api.modules.payments.infrastructure.external.stripe_gateway import configure_stripe_client
from patient_api.shared.config.settings import get_settings
from patient_api.shared.config.supabase import cleanup_supabase
from patient_api.shared.core.rate_limiter import configure_limiter, rate_limit_exceeded_handler
from patient_api.shared.infrastructure.database.connection import close_database, initialize_database
from patient_api.shared.infrastructure.database.session import initialize_sessions, session_manager
from patient_api.shared.utils.logging import log_shutdown_event, log_startup_event, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Opens the database engine and session factory and applies the Stripe network
    settings on startup; releases the database and the Supabase client on shutdown.
    """
    settings = get_settings()
    setup_logging()
    log_startup_event(settings.SERVICE_NAME, settings.APP_VERSION, {"environment": settings.ENVIRONMENT})

    await initialize_database()
    logger.info("✅ Database connection initialized")

    initialize_sessions()
    logger.info("✅ Session manager initialized")

    configure_stripe_client(settings)

    try:
        yield  # Application is running
    finally:
        log_shutdown_event(settings.SERVICE_NAME)

        session_manager.reset()
        await close_database()
        logger.info("✅ Database connections closed")

        await cleanup_supabase()
        logger.info("✅ Shutdown complete")


def create_application() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application with all necessary
    middleware, routers, and settings based on the current environment.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        openapi_tags=API_TAGS,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # =========================================================================
    # MIDDLEWARE CONFIGURATION (last added runs first)
    # =========================================================================

    if not settings.is_testing:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(ErrorHandlingMiddleware)

    # CORS outermost so error responses carry CORS headers too
    setup_cors(app)

    # =========================================================================
    # RATE LIMITING & EXCEPTION HANDLERS
    # =========================================================================

    app.state.limiter = configure_limiter()
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_exception_handlers(app)

    # Whenever a service asks for a repository blueprint, give it the SQLAlchemy implementation
    app.dependency_overrides[ResponseRepository] = ResponseRepositoryImpl
    app.dependency_overrides[SubscriptionRepository] = SubscriptionRepositoryImpl
    app.dependency_overrides[WebhookEventRepository] = WebhookEventRepositoryImpl

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    api_base = f"{API_PREFIX}/{CURRENT_VERSION}"
    app.include_router(api_v1_router, prefix=api_base)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": settings.APP_DESCRIPTION,
            "docs_url": "/docs" if settings.DEBUG else None,
            "health_check": f"{api_base}/health",
            "api_base": api_base,
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        """Favicon endpoint to prevent 404 errors."""
        return Response(status_code=204)

    return app


# Create the FastAPI application
app = create_application()


def main():
    """
    Main function for running the application in development.

    This function is used when running the application directly
    with python -m patient_api.main or as a script entry point.
    """
    settings = get_settings()
    uvicorn.run(
        "patient_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
        workers=1 if settings.RELOAD else settings.WORKERS,
    )


if __name__ == "__main__":
    main()
