"""Health check endpoints."""

from fastapi import APIRouter, Request
from sqlalchemy import text

from physiopro import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Basic health check."""
    return {
        "status": "healthy",
        "service": "physiopro",
        "version": __version__,
    }


@router.get("/health/ready")
async def readiness_check(request: Request) -> dict:
    """Readiness check - verifies the data store and model providers."""
    from physiopro.core.database import _get_session_factory

    errors = []
    llm_health: dict = {}

    try:
        async with _get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        errors.append(f"Database check failed: {e}")

    try:
        llm_health = await request.app.state.llm_router.health_check()
        if not any(llm_health.values()):
            errors.append("No LLM available")
    except Exception as e:
        errors.append(f"LLM check failed: {e}")

    if errors:
        return {
            "status": "not_ready",
            "errors": errors,
        }

    return {
        "status": "ready",
        "llm": llm_health,
    }


@router.get("/health/live")
async def liveness_check() -> dict:
    """Liveness check - basic process health."""
    return {"status": "alive"}
