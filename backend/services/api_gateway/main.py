"""
API Gateway - Main entry point for the simulation dashboard backend.

Serves the operator controls, emergency queue, device list and analytics of
the alert network dashboard, and runs the simulation tick worker.
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from services.api_gateway.middleware import AuditMiddleware
from services.api_gateway.routes import (
    alerts, analytics, devices, health, simulation, websocket
)
from services.simulation_session import SimulationSession
from services.simulation_worker import run_simulation_worker
from shared_libraries.config import get_settings
from shared_libraries.logging import get_logger, setup_logging

# Load settings
settings = get_settings()

# Setup logging
setup_logging(service_name="api-gateway", log_level=settings.effective_log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Startup and shutdown events for the FastAPI application."""
    session = SimulationSession.create(settings)
    app.state.session = session

    worker = None
    if settings.simulation_autostart:
        worker = asyncio.create_task(
            run_simulation_worker(session, on_alert=websocket.broadcast_alert)
        )

    logger.info("api_gateway_started", host=settings.api_host, port=settings.api_port)
    yield

    # Shutdown
    if worker is not None:
        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker
    app.state.session = None
    logger.info("api_gateway_shutdown")


app = FastAPI(
    title="Alert Network Simulation API",
    description="Backend API for the personal emergency alert network simulation dashboard.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=f"{settings.api_prefix}/docs",
    openapi_url=f"{settings.api_prefix}/openapi.json",
)

# Instrument Prometheus
Instrumentator().instrument(app).expose(app)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuditMiddleware)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_type": type(exc).__name__},
    )


# Health checks
@app.get("/health", tags=["System"])
async def root_health():
    return {"status": "ok"}


# Routes
app.include_router(health.router, prefix=f"{settings.api_prefix}/health", tags=["System"])
app.include_router(simulation.router, prefix=f"{settings.api_prefix}/simulation", tags=["Simulation"])
app.include_router(alerts.router, prefix=f"{settings.api_prefix}/alerts", tags=["Emergency Queue"])
app.include_router(devices.router, prefix=f"{settings.api_prefix}/devices", tags=["Devices"])
app.include_router(analytics.router, prefix=f"{settings.api_prefix}/analytics", tags=["Analytics"])

# WebSocket streaming
app.include_router(websocket.router, prefix="/ws", tags=["WebSocket"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "services.api_gateway.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
