"""
Emergency queue endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from domain.models import AlertStatus
from services.api_gateway.dependencies import get_session
from services.api_gateway.routes.websocket import broadcast_alert
from services.api_gateway.schemas import AlertList, AlertResponse, AlertStatusUpdate
from services.simulation_session import SimulationSession

router = APIRouter()


@router.get("/", response_model=AlertList)
async def list_alerts(
    status_filter: AlertStatus | None = Query(None, alias="status"),
    session: SimulationSession = Depends(get_session),
) -> AlertList:
    """Alert history ordered by priority then most recent first."""
    alerts = session.queue(status_filter)
    pending = sum(1 for a in session.alerts if a.status == AlertStatus.RECEIVED)

    return AlertList(
        items=[AlertResponse.model_validate(a) for a in alerts],
        total=session.total_alerts,
        pending=pending,
    )


@router.get("/{alert_id}", response_model=AlertResponse)
async def get_alert(
    alert_id: str,
    session: SimulationSession = Depends(get_session),
):
    try:
        return session.find_alert(alert_id)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert {alert_id} not found",
        )


@router.patch("/{alert_id}/status", response_model=AlertResponse)
async def update_alert_status(
    alert_id: str,
    payload: AlertStatusUpdate,
    session: SimulationSession = Depends(get_session),
):
    """Move an alert along the queue (received, in_progress, resolved)."""
    try:
        alert = session.update_alert_status(alert_id, payload.status)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert {alert_id} not found",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    await broadcast_alert(alert)
    return alert
