"""
Domain records for the alert network simulation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from shared_libraries.constants import (
    ANY_ALERT_TYPE,
    ANY_ZONE,
    DEFAULT_ALERT_INTERVAL_SECONDS,
)


class AlertType(str, Enum):
    """Kind of emergency reported by a device."""

    FALL_DETECTED = "FALL_DETECTED"
    BUTTON_PRESSED = "BUTTON_PRESSED"


class AlertPriority(str, Enum):
    """Priority used to order the emergency queue."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Lifecycle status of an alert in the emergency queue."""

    RECEIVED = "received"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class DeviceStatus(str, Enum):
    """Health status derived from battery and signal levels."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    LOW_BATTERY = "low_battery"
    WEAK_SIGNAL = "weak_signal"


class Scenario(str, Enum):
    """Preset that scales alert probabilities and priority rules."""

    NORMAL = "normal"
    PEAK = "peak"
    EMERGENCY = "emergency"
    MAINTENANCE = "maintenance"


# =============================================================================
# Entities
# =============================================================================


@dataclass(frozen=True)
class Device:
    """Simulated fleet member. Read-only to the simulation manager."""

    id: str
    name: str
    latitude: float
    longitude: float
    battery_level: float
    signal_strength: float
    last_activity: datetime
    status: DeviceStatus
    zone: str


@dataclass
class Alert:
    """Synthesized emergency event."""

    id: str
    device_id: str
    type: AlertType
    timestamp: datetime
    latitude: float
    longitude: float
    battery_level: float
    signal_strength: float
    priority: AlertPriority
    status: AlertStatus = AlertStatus.RECEIVED


@dataclass
class SimulationParameters:
    """Operator-tunable simulation parameters."""

    alert_interval_seconds: int = DEFAULT_ALERT_INTERVAL_SECONDS
    zone_selector: str = ANY_ZONE
    alert_type_selector: str = ANY_ALERT_TYPE
    scenario: Scenario = Scenario.NORMAL
    is_running: bool = True
    alert_probability_override: float | None = None
    fall_probability_override: float | None = None


@dataclass
class SimulationStatistics:
    """Running counters, reset only by an explicit reset."""

    start_time: datetime
    total_generated_alerts: int = 0
    last_alert_time: datetime | None = None
    scenario_start_time: datetime | None = None


@dataclass
class SimulationState:
    """Snapshot of a manager's parameters and statistics."""

    params: SimulationParameters
    stats: SimulationStatistics
