"""Domain records package."""

from domain.models import (
    Alert,
    AlertPriority,
    AlertStatus,
    AlertType,
    Device,
    DeviceStatus,
    Scenario,
    SimulationParameters,
    SimulationState,
    SimulationStatistics,
)

__all__ = [
    "Alert",
    "AlertPriority",
    "AlertStatus",
    "AlertType",
    "Device",
    "DeviceStatus",
    "Scenario",
    "SimulationParameters",
    "SimulationState",
    "SimulationStatistics",
]
