"""FastAPI application for PhysioPro."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from physiopro import __version__
from physiopro.api.middleware import APIKeyMiddleware, RequestLoggingMiddleware
from physiopro.api.routes import (
    ai,
    analytics,
    announcements,
    appointments,
    audit_log,
    auth,
    billing,
    clinicians,
    communication,
    education,
    exercises,
    health,
    messaging,
    notifications,
    patient_portal,
    patients,
    platform_settings,
    program_templates,
    programs,
    support,
    team,
)
from physiopro.config import get_settings
from physiopro.llm import LLMError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting PhysioPro API")

    from physiopro.core.database import dispose_engine, init_db
    from physiopro.llm import create_router_from_settings

    await init_db()
    app.state.llm_router = create_router_from_settings()

    logger.info("PhysioPro API started successfully")

    yield

    logger.info("Shutting down PhysioPro API")
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PhysioPro API",
        description="Exercise prescription platform for clinicians, patients and admins",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    if settings.api_key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.api_key)

    app.include_router(health.router, tags=["health"])
    for module, tag in (
        (auth, "auth"),
        (clinicians, "clinicians"),
        (team, "team"),
        (audit_log, "audit-log"),
        (exercises, "exercises"),
        (program_templates, "program-templates"),
        (programs, "programs"),
        (patients, "patients"),
        (appointments, "appointments"),
        (messaging, "messaging"),
        (patient_portal, "patient-portal"),
        (notifications, "notifications"),
        (billing, "billing"),
        (support, "support"),
        (announcements, "announcements"),
        (education, "education"),
        (platform_settings, "settings"),
        (communication, "communication"),
        (analytics, "analytics"),
        (ai, "ai"),
    ):
        app.include_router(module.router, prefix="/api/v1", tags=[tag])

    @app.exception_handler(LLMError)
    async def llm_exception_handler(request: Request, exc: LLMError):
        logger.error(f"AI call failed on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"error": "AI service unavailable", "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.debug_mode else None,
            },
        )

    return app
