"""Routes package for API Gateway."""

from . import alerts, analytics, devices, health, simulation, websocket

__all__ = [
    "alerts",
    "analytics",
    "devices",
    "health",
    "simulation",
    "websocket",
]
