"""Keepsake - FastAPI Application Factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from keepsake.api import api_router
from keepsake.api.health import router as health_router
from keepsake.api.pages import router as pages_router
from keepsake.core import engine, settings, setup_logging
from keepsake.core.config import Settings
from keepsake.core.logging import get_logger
from keepsake.middleware import SecurityHeadersMiddleware, SessionGuardMiddleware

# Import all models to ensure they're registered with Base for Alembic
from keepsake.models import InterviewSession, Interviewee, Project  # noqa: F401
from keepsake.services.session import SessionSigner

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    setup_logging(
        level=settings.log_level,
        format_type="structured" if not settings.debug else "dev",
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    for warning in settings.check_security_configuration():
        logger.warning(f"SECURITY: {warning}")

    yield

    logger.info("Shutting down...")
    await engine.dispose()


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Raises ConfigurationError when the project-token secret is missing, so a
    misconfigured process never starts serving.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.app_name,
        description="One-time share links and session access for memoir projects",
        version=app_settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        openapi_url="/openapi.json" if app_settings.debug else None,
    )

    app.state.session_signer = SessionSigner.from_settings(app_settings)

    app.add_middleware(SessionGuardMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - MUST be outermost (added last in Starlette LIFO order)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )

    if app_settings.enable_metrics:
        from prometheus_fastapi_instrumentator import Instrumentator

        # Share-link paths embed tokens; group them under the route template
        Instrumentator(
            excluded_handlers=["/health", "/metrics"],
            should_group_untemplated=True,
        ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    app.include_router(health_router)
    app.include_router(pages_router)
    app.include_router(api_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
        }

    return app


# Application instance
app = create_app()
