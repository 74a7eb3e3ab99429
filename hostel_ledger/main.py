from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from hostel_ledger.api.errors import register_exception_handlers
from hostel_ledger.api.v1.router import router as api_v1_router
from hostel_ledger.config.logging import setup_logging
from hostel_ledger.config.settings import Settings, get_settings
from hostel_ledger.core.cache import CacheBackend
from hostel_ledger.core.container import ServiceContainer
from hostel_ledger.core.middleware import register_middlewares
from hostel_ledger.db.init_db import init_db
from hostel_ledger.db.session import get_engine, get_session_factory
from hostel_ledger.services.communication.email_service import EmailSender
from hostel_ledger.utils.date_utils import Clock

logger = logging.getLogger(__name__)

TokenVerifier = Callable[[str], Dict[str, Any]]


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[Callable[[], Session]] = None,
    engine: Optional[Engine] = None,
    clock: Optional[Clock] = None,
    email_sender: Optional[EmailSender] = None,
    cache_backend: Optional[CacheBackend] = None,
    token_verifier: Optional[TokenVerifier] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Builds the service container on ``app.state.container``.
    - Includes the versioned API router under /api/v1.

    When no session factory is given the configured database is used and,
    outside production, its schema is created on startup.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    manage_schema = session_factory is None
    if session_factory is None:
        engine = engine or get_engine()
        session_factory = get_session_factory()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )

    app.state.settings = settings
    app.state.token_verifier = token_verifier
    app.state.container = ServiceContainer.build(
        settings,
        session_factory,
        clock=clock,
        email_sender=email_sender,
        cache_backend=cache_backend,
    )

    # CORS Configuration
    origins = settings.CORS_ORIGINS or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    def health() -> Dict[str, str]:
        return {"status": "ok", "version": settings.VERSION}

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    if manage_schema:
        @app.on_event("startup")
        def on_startup() -> None:
            if not settings.is_production():
                # For production, use migrations
                init_db(engine, session_factory, seed_plans=settings.SEED_DEFAULT_PLANS)

    logger.info(
        f"{settings.APP_NAME} {settings.VERSION} configured",
        extra={"environment": settings.ENVIRONMENT},
    )
    return app


def run() -> None:
    """Serve the app with uvicorn, e.g. ``hostel-ledger`` from the command line."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "hostel_ledger.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development(),
        log_config=None,
    )
