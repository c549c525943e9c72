"""
Shared FastAPI dependencies for the API Gateway.
"""

from fastapi import HTTPException, status
from fastapi.requests import HTTPConnection

from services.simulation_session import SimulationSession


def get_session(connection: HTTPConnection) -> SimulationSession:
    """Dashboard session created at startup.

    Overridden through `app.dependency_overrides` in tests.
    """
    session = getattr(connection.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Simulation session not initialized",
        )
    return session
