"""RenewalPro API: FastAPI application factory."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from renewalpro.core.config import settings
from renewalpro.core.exceptions import register_exception_handlers
from renewalpro.db.base import engine
from renewalpro.middleware.audit import AuditMiddleware, drain_pending
from renewalpro.routers.v1.admin import router as admin_router
from renewalpro.routers.v1.agent_invitations import router as agent_invitations_router
from renewalpro.routers.v1.agents import router as agents_router
from renewalpro.routers.v1.compliance import officers_router
from renewalpro.routers.v1.compliance import router as compliance_router
from renewalpro.routers.v1.dashboard import router as dashboard_router
from renewalpro.routers.v1.entities import router as entities_router
from renewalpro.routers.v1.notifications import router as notifications_router
from renewalpro.routers.v1.payments import methods_router as payment_methods_router
from renewalpro.routers.v1.payments import router as payments_router
from renewalpro.routers.v1.subscription import router as subscription_router
from renewalpro.routers.v1.teams import router as teams_router
from renewalpro.schemas.common import HealthResponse
from renewalpro.services.admin import get_admin_cache

V1_ROUTERS = (
    entities_router,
    officers_router,
    compliance_router,
    dashboard_router,
    payments_router,
    payment_methods_router,
    notifications_router,
    teams_router,
    agents_router,
    agent_invitations_router,
    subscription_router,
    admin_router,
)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await drain_pending()
    await get_admin_cache().close()
    await engine.dispose()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    for router in V1_ROUTERS:
        app.include_router(router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
