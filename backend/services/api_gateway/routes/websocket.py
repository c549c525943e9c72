"""
WebSocket endpoints for real-time streaming.

Pushes generated alerts and queue status changes to the dashboard.
"""

import asyncio
import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from domain.models import Alert
from services.api_gateway.dependencies import get_session
from services.simulation_session import SimulationSession
from shared_libraries.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)

HEARTBEAT_SECONDS = 30.0


# =============================================================================
# Connection Manager
# =============================================================================

class ConnectionManager:
    """Manages WebSocket connections for real-time streaming."""

    def __init__(self):
        self.alert_connections: set[WebSocket] = set()

    async def connect_alerts(self, websocket: WebSocket):
        await websocket.accept()
        self.alert_connections.add(websocket)
        logger.info("websocket_connected", channel="alerts", total=len(self.alert_connections))

    def disconnect_alerts(self, websocket: WebSocket):
        self.alert_connections.discard(websocket)
        logger.info("websocket_disconnected", channel="alerts", total=len(self.alert_connections))

    async def broadcast_alerts(self, data: dict):
        """Broadcast alert to all connected clients."""
        if not self.alert_connections:
            return

        message = json.dumps(data, default=str)
        for connection in list(self.alert_connections):
            try:
                await connection.send_text(message)
            except Exception:
                self.alert_connections.discard(connection)


# Connection manager shared by the routes and the simulation worker
manager = ConnectionManager()


# =============================================================================
# Helper Functions
# =============================================================================

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def serialize_alert(alert: Alert) -> dict:
    """Serialize an alert for JSON transmission."""
    return {
        "id": alert.id,
        "deviceId": alert.device_id,
        "type": alert.type.value,
        "timestamp": alert.timestamp.isoformat(),
        "latitude": alert.latitude,
        "longitude": alert.longitude,
        "batteryLevel": alert.battery_level,
        "signalStrength": alert.signal_strength,
        "status": alert.status.value,
        "priority": alert.priority.value,
    }


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@router.websocket("/alerts/live")
async def websocket_alerts(
    websocket: WebSocket,
    session: SimulationSession = Depends(get_session),
):
    """
    WebSocket endpoint for streaming alerts.

    Clients receive the current history, then new and updated alerts.
    """
    await manager.connect_alerts(websocket)

    try:
        await websocket.send_text(json.dumps({
            "type": "initial",
            "alerts": [serialize_alert(a) for a in session.alerts],
            "timestamp": _now(),
        }))

        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(), timeout=HEARTBEAT_SECONDS
                )

                if data == "ping":
                    await websocket.send_text("pong")

            except asyncio.TimeoutError:
                await websocket.send_text(json.dumps({
                    "type": "heartbeat",
                    "timestamp": _now(),
                }))

    except WebSocketDisconnect:
        manager.disconnect_alerts(websocket)
    except Exception as e:
        logger.error("websocket_error", channel="alerts", error=str(e))
        manager.disconnect_alerts(websocket)


# =============================================================================
# Broadcast Functions (called by routes and the simulation worker)
# =============================================================================

async def broadcast_alert(alert: Alert):
    """Broadcast a new or updated alert to all connected clients."""
    await manager.broadcast_alerts({
        "type": "alert",
        "data": serialize_alert(alert),
        "timestamp": _now(),
    })
