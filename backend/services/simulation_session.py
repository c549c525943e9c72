"""
Simulation Session.

Caller side of a dashboard session: owns the simulation manager, the device
roster and the bounded alert history the widgets render from.
"""

import random
from collections import deque
from datetime import datetime
from typing import Any, Callable

from domain.models import (
    Alert,
    AlertPriority,
    AlertStatus,
    AlertType,
    Device,
    DeviceStatus,
    Scenario,
)
from services.analytics import (
    calculate_active_devices_percentage,
    calculate_response_time,
)
from services.device_fleet import create_fleet, drift_fleet
from services.simulation_manager import SimulationManager, utcnow
from shared_libraries.config import Settings
from shared_libraries.constants import ANY_ZONE, MAX_ALERTS_HISTORY, PARIS_CENTER, PRIORITY_WEIGHTS
from shared_libraries.logging import get_logger

logger = get_logger(__name__)

PEAK_BURST_SIZE = 5
EMERGENCY_BURST_SIZE = 3
MAINTENANCE_DEVICE_ID = "device_test"

ALLOWED_TRANSITIONS = {
    AlertStatus.RECEIVED: {AlertStatus.IN_PROGRESS, AlertStatus.RESOLVED},
    AlertStatus.IN_PROGRESS: {AlertStatus.RESOLVED},
    AlertStatus.RESOLVED: set(),
}


def maintenance_test_device(now: datetime) -> Device:
    """Bench device used by the maintenance scenario's test alert."""
    lat, lng = PARIS_CENTER
    return Device(
        id=MAINTENANCE_DEVICE_ID,
        name="Test Device",
        latitude=lat,
        longitude=lng,
        battery_level=100.0,
        signal_strength=100.0,
        last_activity=now,
        status=DeviceStatus.ACTIVE,
        zone="",
    )


class SimulationSession:
    """One dashboard session: manager, roster and alert history."""

    def __init__(
        self,
        manager: SimulationManager,
        devices: list[Device],
        max_alerts_history: int = MAX_ALERTS_HISTORY,
        rng: random.Random | None = None,
    ):
        self.manager = manager
        self.devices = devices
        self.alerts: deque[Alert] = deque(maxlen=max_alerts_history)
        self.total_alerts = 0
        self.critical_alerts = 0
        self._rng = rng or random.Random()

    @classmethod
    def create(
        cls, settings: Settings, clock: Callable[[], datetime] = utcnow
    ) -> "SimulationSession":
        """Build a session with a fresh fleet from settings."""
        rng = random.Random(settings.random_seed)
        manager = SimulationManager(rng=rng, clock=clock)
        devices = create_fleet(settings.device_count, rng, clock())
        logger.info(
            "simulation_session_created",
            devices=len(devices),
            seed=settings.random_seed,
        )
        return cls(manager, devices, settings.max_alerts_history, rng)

    # =========================================================================
    # Ticks and alerts
    # =========================================================================

    def tick(self) -> Alert | None:
        """Drift the fleet and give the manager a chance to emit an alert."""
        if not self.manager.params.is_running:
            return None

        self.devices = drift_fleet(self.devices, self._rng)
        alert = self.manager.tick(self.devices)
        if alert is not None:
            self.record_alert(alert)
        return alert

    def record_alert(self, alert: Alert) -> None:
        """Prepend to the bounded history and update the UI counters."""
        self.alerts.appendleft(alert)
        self.total_alerts += 1
        if alert.priority == AlertPriority.CRITICAL:
            self.critical_alerts += 1

    def generate_test_alert(
        self,
        zone_selector: str | None = None,
        alert_type: AlertType | None = None,
    ) -> Alert | None:
        """Operator-triggered alert outside the automatic schedule."""
        alert = self.manager.create_test_alert(
            self.devices, alert_type=alert_type, zone_selector=zone_selector
        )
        if alert is not None:
            self.record_alert(alert)
        return alert

    def trigger_scenario(self, scenario: Scenario | str) -> list[Alert]:
        """Switch scenario and inject its canned burst of alerts."""
        scenario = Scenario(scenario)
        self.manager.update_parameters(scenario=scenario)

        burst: list[Alert | None] = []
        if scenario == Scenario.PEAK:
            burst = [self.manager.create_test_alert(self.devices) for _ in range(PEAK_BURST_SIZE)]
        elif scenario == Scenario.EMERGENCY:
            burst = [
                self.manager.create_test_alert(
                    self.devices,
                    alert_type=AlertType.FALL_DETECTED,
                    priority=AlertPriority.CRITICAL,
                )
                for _ in range(EMERGENCY_BURST_SIZE)
            ]
        elif scenario == Scenario.MAINTENANCE:
            burst = [
                self.manager.create_test_alert(
                    [maintenance_test_device(utcnow())],
                    alert_type=AlertType.BUTTON_PRESSED,
                    priority=AlertPriority.LOW,
                    zone_selector=ANY_ZONE,
                    jitter=False,
                )
            ]

        alerts = [a for a in burst if a is not None]
        for alert in alerts:
            self.record_alert(alert)

        logger.info("scenario_triggered", scenario=scenario.value, alerts=len(alerts))
        return alerts

    # =========================================================================
    # Emergency queue
    # =========================================================================

    def find_alert(self, alert_id: str) -> Alert:
        for alert in self.alerts:
            if alert.id == alert_id:
                return alert
        raise KeyError(alert_id)

    def update_alert_status(self, alert_id: str, status: AlertStatus | str) -> Alert:
        """Move an alert along received -> in_progress -> resolved.

        Raises:
            KeyError: if the alert is not in the history.
            ValueError: if the transition is not allowed.
        """
        status = AlertStatus(status)
        alert = self.find_alert(alert_id)
        if status not in ALLOWED_TRANSITIONS[alert.status]:
            raise ValueError(
                f"Cannot move alert {alert_id} from {alert.status.value} to {status.value}"
            )

        alert.status = status
        logger.info("alert_status_updated", alert_id=alert_id, status=status.value)
        return alert

    def queue(self, status: AlertStatus | str | None = None) -> list[Alert]:
        """History filtered by status, by priority then most recent first."""
        alerts = list(self.alerts)
        if status is not None:
            status = AlertStatus(status)
            alerts = [a for a in alerts if a.status == status]

        return sorted(
            alerts,
            key=lambda a: (PRIORITY_WEIGHTS[a.priority.value], a.timestamp),
            reverse=True,
        )

    # =========================================================================
    # Stats
    # =========================================================================

    def dashboard_stats(self) -> dict[str, Any]:
        alerts = list(self.alerts)
        active_devices = sum(1 for d in self.devices if d.status == DeviceStatus.ACTIVE)
        return {
            "total_alerts": self.total_alerts,
            "critical_alerts": self.critical_alerts,
            "active_devices": active_devices,
            "active_devices_percentage": calculate_active_devices_percentage(self.devices),
            "avg_response_time": calculate_response_time(alerts),
            "total_generated_alerts": self.manager.stats.total_generated_alerts,
            "uptime": self.manager.get_uptime(),
            "events_per_hour": self.manager.get_events_per_hour(),
            "system_reliability": self.manager.get_system_reliability(),
        }

    def reset(self) -> None:
        """Reset manager statistics, history and counters. Parameters persist."""
        self.manager.reset()
        self.alerts.clear()
        self.total_alerts = 0
        self.critical_alerts = 0
        logger.info("simulation_session_reset")
