"""Health check endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "api-gateway"}


@router.get("/ready")
async def readiness_check(request: Request) -> dict:
    """Readiness check: the simulation session exists."""
    ready = getattr(request.app.state, "session", None) is not None
    return {"status": "ready" if ready else "starting"}
