"""
Pydantic models shared by the API Gateway routes.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from domain.models import (
    AlertPriority,
    AlertStatus,
    AlertType,
    DeviceStatus,
    Scenario,
)


class AlertResponse(BaseModel):
    """Response model for alert data."""

    id: str
    device_id: str
    type: AlertType
    timestamp: datetime
    latitude: float
    longitude: float
    battery_level: float
    signal_strength: float
    status: AlertStatus
    priority: AlertPriority

    model_config = ConfigDict(from_attributes=True)


class AlertList(BaseModel):
    """Emergency queue."""

    items: list[AlertResponse]
    total: int
    pending: int


class AlertStatusUpdate(BaseModel):
    status: AlertStatus


class DeviceResponse(BaseModel):
    """Response model for device data."""

    id: str
    name: str
    latitude: float
    longitude: float
    battery_level: float
    signal_strength: float
    last_activity: datetime
    status: DeviceStatus
    zone: str

    model_config = ConfigDict(from_attributes=True)


class DeviceList(BaseModel):
    items: list[DeviceResponse]
    total: int


class SimulationParametersResponse(BaseModel):
    alert_interval_seconds: int
    zone_selector: str
    alert_type_selector: str
    scenario: Scenario
    is_running: bool
    alert_probability_override: float | None
    fall_probability_override: float | None

    model_config = ConfigDict(from_attributes=True)


class SimulationParametersUpdate(BaseModel):
    """Partial update; only the supplied fields change."""

    alert_interval_seconds: int | None = Field(None, ge=1)
    zone_selector: str | None = None
    alert_type_selector: Literal["random", "FALL_DETECTED", "BUTTON_PRESSED"] | None = None
    scenario: Scenario | None = None
    is_running: bool | None = None
    alert_probability_override: float | None = Field(None, ge=0, le=1)
    fall_probability_override: float | None = Field(None, ge=0, le=1)


class SimulationStatisticsResponse(BaseModel):
    start_time: datetime
    total_generated_alerts: int
    last_alert_time: datetime | None
    scenario_start_time: datetime | None

    model_config = ConfigDict(from_attributes=True)


class SimulationStateResponse(BaseModel):
    params: SimulationParametersResponse
    stats: SimulationStatisticsResponse
    simulation_interval_ms: int
    alert_probability: float
    fall_detection_probability: float


class DashboardStatsResponse(BaseModel):
    total_alerts: int
    critical_alerts: int
    active_devices: int
    active_devices_percentage: int
    avg_response_time: int
    total_generated_alerts: int
    uptime: str
    events_per_hour: int
    system_reliability: str


class ManualAlertRequest(BaseModel):
    zone_selector: str | None = None
    alert_type: AlertType | None = None


class TickResponse(BaseModel):
    alert: AlertResponse | None


class ScenarioResponse(BaseModel):
    scenario: Scenario
    alerts: list[AlertResponse]
