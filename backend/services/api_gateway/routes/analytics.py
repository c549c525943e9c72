"""
Analytics endpoints feeding the dashboard charts.
"""

from typing import Any

from fastapi import APIRouter, Depends

from services.analytics import (
    calculate_active_devices_percentage,
    calculate_response_time,
    get_alerts_by_hour,
    get_alerts_by_priority,
    get_alerts_by_status,
    get_alerts_by_type,
    get_alerts_by_zone,
)
from services.api_gateway.dependencies import get_session
from services.simulation_session import SimulationSession

router = APIRouter()


@router.get("/overview", response_model=dict[str, Any])
async def get_analytics_overview(session: SimulationSession = Depends(get_session)):
    """
    Get aggregated chart data over the current alert history.
    """
    alerts = list(session.alerts)
    return {
        "alerts_by_hour": get_alerts_by_hour(alerts),
        "alerts_by_zone": get_alerts_by_zone(alerts, session.devices),
        "alerts_by_type": get_alerts_by_type(alerts),
        "alerts_by_priority": get_alerts_by_priority(alerts),
        "alerts_by_status": get_alerts_by_status(alerts),
        "avg_response_time": calculate_response_time(alerts),
        "active_devices_percentage": calculate_active_devices_percentage(session.devices),
    }
