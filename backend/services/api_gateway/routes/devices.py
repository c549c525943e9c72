"""
Device list endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends

from domain.models import DeviceStatus
from services.api_gateway.dependencies import get_session
from services.api_gateway.schemas import DeviceList, DeviceResponse
from services.device_fleet import count_by_status, filter_devices
from services.simulation_session import SimulationSession

router = APIRouter()


@router.get("/", response_model=DeviceList)
async def list_devices(
    search: str | None = None,
    status: str | None = None,
    zone: str | None = None,
    session: SimulationSession = Depends(get_session),
) -> DeviceList:
    """List devices with optional search, status and zone filters."""
    devices = filter_devices(session.devices, search=search, status=status, zone=zone)
    return DeviceList(
        items=[DeviceResponse.model_validate(d) for d in devices],
        total=len(session.devices),
    )


@router.get("/summary", response_model=dict[str, Any])
async def get_device_summary(session: SimulationSession = Depends(get_session)):
    """Device counts by status and per zone."""
    zones: dict[str, dict[str, int]] = {}
    for device in session.devices:
        entry = zones.setdefault(device.zone, {"total": 0, "active": 0})
        entry["total"] += 1
        if device.status == DeviceStatus.ACTIVE:
            entry["active"] += 1

    return {
        "total": len(session.devices),
        "by_status": count_by_status(session.devices),
        "by_zone": zones,
    }
