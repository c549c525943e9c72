"""
Simulation Manager.

Owns the simulation parameters and running statistics, and decides on each
tick whether to synthesize an alert, against which device, of which type and
priority. Randomness and time are injected so a session can be replayed.
"""

import copy
import random
import threading
from dataclasses import fields
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable
from uuid import uuid4

from domain.models import (
    Alert,
    AlertPriority,
    AlertStatus,
    AlertType,
    Device,
    Scenario,
    SimulationParameters,
    SimulationState,
    SimulationStatistics,
)
from shared_libraries.constants import (
    ALERT_GENERATION_PROBABILITY,
    ANY_ALERT_TYPE,
    ANY_ZONE,
    BASE_RELIABILITY,
    BATTERY_READING_VARIATION,
    DEFAULT_ZONE_NAME,
    DEVICE_SPREAD,
    EMERGENCY_INTERVAL_MS,
    EMERGENCY_RELIABILITY_MALUS,
    FALL_DETECTION_PROBABILITY,
    MAX_RELIABILITY_BONUS,
    PEAK_INTERVAL_MS,
    RELIABILITY_BONUS_PER_HOUR,
    SCENARIO_ALERT_MULTIPLIERS,
    SCENARIO_FALL_PROBABILITIES,
    SIGNAL_READING_VARIATION,
    SIMULATION_INTERVAL_MS,
    ZONE_NAMES_BY_SELECTOR,
)
from shared_libraries.logging import get_logger

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
PARAMETER_FIELDS = frozenset(f.name for f in fields(SimulationParameters))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def zone_name_for_selector(selector: str) -> str:
    """Map a zone selector (zone1..zone5) to its zone name.

    Unknown selectors fall back to the default zone.
    """
    return ZONE_NAMES_BY_SELECTOR.get(selector, DEFAULT_ZONE_NAME)


class SimulationManager:
    """Parameterized synthetic alert generator.

    One instance per dashboard session. The device roster is passed in on
    every call and never cached or mutated; generated alerts are handed to
    the caller, which owns the alert history.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
        params: SimulationParameters | None = None,
    ):
        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = threading.Lock()
        self.params = params or SimulationParameters()
        self.stats = SimulationStatistics(start_time=clock())

    # =========================================================================
    # Parameters
    # =========================================================================

    def update_parameters(self, **changes) -> SimulationParameters:
        """Merge the supplied fields into the current parameters.

        Probability overrides are clamped to [0, 1] and the alert interval to
        at least one second. Passing a scenario stamps a new scenario start.

        Raises:
            TypeError: if a field name is not a simulation parameter.
            ValueError: if the scenario or the alert type selector is unknown.
                Nothing is applied in that case.
        """
        unknown = set(changes) - PARAMETER_FIELDS
        if unknown:
            raise TypeError(f"Unknown simulation parameters: {sorted(unknown)}")

        normalized = {name: self._normalize(name, value) for name, value in changes.items()}

        with self._lock:
            for name, value in normalized.items():
                setattr(self.params, name, value)

            if "scenario" in changes:
                self.stats.scenario_start_time = self._clock()

        logger.info(
            "simulation_parameters_updated",
            changes={k: getattr(self.params, k) for k in changes},
        )
        return self.params

    @staticmethod
    def _normalize(name: str, value):
        if name == "scenario":
            return Scenario(value)
        if name == "alert_interval_seconds":
            return max(1, int(value))
        if name in ("alert_probability_override", "fall_probability_override"):
            return None if value is None else clamp(float(value), 0.0, 1.0)
        if name == "is_running":
            return bool(value)

        selector = value.value if isinstance(value, Enum) else str(value)
        if name == "alert_type_selector" and selector != ANY_ALERT_TYPE:
            AlertType(selector)
        # Unknown zone selectors are kept and fall back to the default zone
        return selector

    def get_state(self) -> SimulationState:
        """Snapshot of parameters and statistics, detached from the manager."""
        with self._lock:
            return SimulationState(
                params=copy.deepcopy(self.params),
                stats=copy.deepcopy(self.stats),
            )

    # =========================================================================
    # Probabilities
    # =========================================================================

    def get_alert_probability(self) -> float:
        base = self.params.alert_probability_override
        if base is None:
            base = ALERT_GENERATION_PROBABILITY
        return base * SCENARIO_ALERT_MULTIPLIERS.get(self.params.scenario.value, 1.0)

    def get_fall_detection_probability(self) -> float:
        fixed = SCENARIO_FALL_PROBABILITIES.get(self.params.scenario.value)
        if fixed is not None:
            return fixed
        base = self.params.fall_probability_override
        return FALL_DETECTION_PROBABILITY if base is None else base

    # =========================================================================
    # Generation
    # =========================================================================

    def should_generate_alert(self) -> bool:
        """Whether the next generation attempt may emit an alert.

        False while paused or before the minimum interval since the last
        alert has elapsed; otherwise one random draw against the alert
        probability.
        """
        with self._lock:
            return self._should_generate_alert(self._clock())

    def _should_generate_alert(self, now: datetime) -> bool:
        if not self.params.is_running:
            return False

        elapsed = now - (self.stats.last_alert_time or EPOCH)
        if elapsed < timedelta(seconds=self.params.alert_interval_seconds):
            return False

        return self._rng.random() < self.get_alert_probability()

    def generate_alert(self, devices: list[Device]) -> Alert | None:
        """Synthesize an alert against the roster, or None.

        Statistics are only touched once every precondition holds.
        """
        with self._lock:
            now = self._clock()
            if not devices or not self._should_generate_alert(now):
                return None

            device = self._select_device(devices, self.params.zone_selector)
            alert_type = self._select_alert_type()
            alert = self._build_alert(
                device, alert_type, self._alert_priority(alert_type), now
            )

            self.stats.total_generated_alerts += 1
            self.stats.last_alert_time = now

        logger.info(
            "alert_generated",
            alert_id=alert.id,
            device_id=alert.device_id,
            type=alert.type.value,
            priority=alert.priority.value,
            scenario=self.params.scenario.value,
        )
        return alert

    def tick(self, devices: list[Device]) -> Alert | None:
        """One invocation of the periodic generation check."""
        if not devices:
            logger.warning("simulation_tick_empty_roster")
        return self.generate_alert(devices)

    def create_test_alert(
        self,
        devices: list[Device],
        alert_type: AlertType | None = None,
        priority: AlertPriority | None = None,
        zone_selector: str | None = None,
        jitter: bool = True,
    ) -> Alert | None:
        """Build an operator-requested alert, bypassing throttle and draw.

        Counts towards the generated total but leaves the last alert time
        untouched, so manual alerts never delay the automatic ones.
        """
        with self._lock:
            if not devices:
                return None

            now = self._clock()
            device = self._select_device(
                devices,
                self.params.zone_selector if zone_selector is None else zone_selector,
            )
            alert_type = alert_type or self._select_alert_type()
            alert = self._build_alert(
                device,
                alert_type,
                priority or self._alert_priority(alert_type),
                now,
                prefix="test_alert",
                jitter=jitter,
            )
            self.stats.total_generated_alerts += 1

        logger.info(
            "test_alert_generated",
            alert_id=alert.id,
            device_id=alert.device_id,
            type=alert.type.value,
            priority=alert.priority.value,
        )
        return alert

    def _select_device(self, devices: list[Device], zone_selector: str) -> Device:
        if zone_selector == ANY_ZONE:
            return self._rng.choice(devices)

        zone_name = zone_name_for_selector(zone_selector)
        zone_devices = [d for d in devices if d.zone == zone_name]
        # An empty zone never blocks generation
        return self._rng.choice(zone_devices or devices)

    def _select_alert_type(self) -> AlertType:
        selector = self.params.alert_type_selector
        if selector != ANY_ALERT_TYPE:
            return AlertType(selector)

        if self._rng.random() < self.get_fall_detection_probability():
            return AlertType.FALL_DETECTED
        return AlertType.BUTTON_PRESSED

    def _alert_priority(self, alert_type: AlertType) -> AlertPriority:
        if alert_type == AlertType.FALL_DETECTED:
            return AlertPriority.CRITICAL

        if self.params.scenario == Scenario.MAINTENANCE:
            return AlertPriority.LOW
        return AlertPriority.HIGH

    def _build_alert(
        self,
        device: Device,
        alert_type: AlertType,
        priority: AlertPriority,
        now: datetime,
        prefix: str = "sim_alert",
        jitter: bool = True,
    ) -> Alert:
        rng = self._rng
        latitude, longitude = device.latitude, device.longitude
        battery, signal = device.battery_level, device.signal_strength

        if jitter:
            spread = DEVICE_SPREAD * (1 + rng.random() * 2)
            latitude += (rng.random() - 0.5) * spread
            longitude += (rng.random() - 0.5) * spread
            battery += (rng.random() - 0.5) * 2 * BATTERY_READING_VARIATION
            signal += (rng.random() - 0.5) * 2 * SIGNAL_READING_VARIATION

        return Alert(
            id=f"{prefix}_{int(now.timestamp() * 1000)}_{uuid4().hex[:12]}",
            device_id=device.id,
            type=alert_type,
            timestamp=now,
            latitude=latitude,
            longitude=longitude,
            battery_level=clamp(battery, 0.0, 100.0),
            signal_strength=clamp(signal, 0.0, 100.0),
            status=AlertStatus.RECEIVED,
            priority=priority,
        )

    # =========================================================================
    # Scheduling and derived metrics
    # =========================================================================

    def get_simulation_interval_ms(self) -> int:
        """Polling interval for the tick driver.

        Smaller than the minimum alert interval so that the throttle inside
        `should_generate_alert` stays the real limit.
        """
        if self.params.scenario == Scenario.EMERGENCY:
            return EMERGENCY_INTERVAL_MS
        if self.params.scenario == Scenario.PEAK:
            return PEAK_INTERVAL_MS
        return SIMULATION_INTERVAL_MS

    def _elapsed_hours(self) -> float:
        elapsed = self._clock() - self.stats.start_time
        return max(elapsed.total_seconds(), 0.0) / 3600

    def get_uptime(self) -> str:
        elapsed = max((self._clock() - self.stats.start_time).total_seconds(), 0.0)
        hours = int(elapsed // 3600)
        minutes = int(elapsed % 3600 // 60)
        return f"{hours}h{minutes}m" if hours > 0 else f"{minutes}m"

    def get_events_per_hour(self) -> int:
        hours = self._elapsed_hours()
        if hours <= 0:
            return 0
        return round(self.stats.total_generated_alerts / hours)

    def get_system_reliability(self) -> str:
        """Synthetic reliability score, cosmetic only."""
        bonus = min(self._elapsed_hours() * RELIABILITY_BONUS_PER_HOUR, MAX_RELIABILITY_BONUS)
        malus = (
            EMERGENCY_RELIABILITY_MALUS
            if self.params.scenario == Scenario.EMERGENCY
            else 0.0
        )
        return f"{BASE_RELIABILITY + bonus - malus:.1f}"

    def reset(self) -> None:
        """Clear statistics. Parameters are kept."""
        with self._lock:
            self.stats = SimulationStatistics(start_time=self._clock())
        logger.info("simulation_statistics_reset")
