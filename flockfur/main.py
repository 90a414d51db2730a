"""
==============================================================================
Flock & Fur Marketplace API - Application Entry Point
==============================================================================

FastAPI application for the farm-animal cleaning marketplace:
- RESTful API endpoints under /api/v1
- JWT authentication
- Stripe payments, S3 photo uploads, Resend email

Usage:
------
    # Development
    uvicorn flockfur.main:app --reload

    # Production
    APP_ENV=production uvicorn flockfur.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from flockfur.config import get_settings
from flockfur.core.exceptions import register_exception_handlers
from flockfur.db import init_db
from flockfur.api.router import api_router
from flockfur.integrations import ResendEmailSender, build_integrations


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Handles application lifecycle including:
    - Database and default admin setup
    - External service clients (app.state.integrations)
    - Middleware, routers and exception handlers
    """

    def __init__(self):
        self._settings = get_settings()
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Marketplace connecting farm owners with animal enclosure cleaners",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        self._configure_middleware(app)
        register_exception_handlers(app)
        app.include_router(api_router)
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        self._startup(app)
        yield
        self._shutdown(app)

    def _startup(self, app: FastAPI) -> None:
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name} ({self._settings.app_env})")
        logger.info("=" * 60)

        init_db()

        app.state.integrations = build_integrations(self._settings)

        logger.info("=" * 60)
        logger.info(f"✅ {self._settings.app_name} ready")
        logger.info(f"📍 Running on http://{self._settings.host}:{self._settings.port}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    def _shutdown(self, app: FastAPI) -> None:
        logger.info("🛑 Shutting down...")
        email = app.state.integrations.email
        if isinstance(email, ResendEmailSender):
            email.close()
        logger.info("✅ Shutdown complete")

    def _configure_middleware(self, app: FastAPI) -> None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_root(self, app: FastAPI) -> None:

        @app.get("/", include_in_schema=False)
        async def root():
            """Redirect to the API docs."""
            return RedirectResponse(url="/docs")

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "flockfur.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
