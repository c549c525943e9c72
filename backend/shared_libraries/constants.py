"""
Static configuration table for the alert network simulation.

Device counts, probability bases, response-time targets and zone anchors.
These are fixed at process start; operators only tune the simulation
through the override fields of the simulation parameters.
"""

from dataclasses import dataclass


# =============================================================================
# Simulation
# =============================================================================

DEVICE_COUNT = 100
SIMULATION_INTERVAL_MS = 3000
EMERGENCY_INTERVAL_MS = 1000
PEAK_INTERVAL_MS = 1500
MAX_ALERTS_HISTORY = 50
ALERT_GENERATION_PROBABILITY = 0.3
FALL_DETECTION_PROBABILITY = 0.6
DEFAULT_ALERT_INTERVAL_SECONDS = 3

# Scenario multipliers applied to the alert probability
SCENARIO_ALERT_MULTIPLIERS = {
    "peak": 3.0,
    "emergency": 5.0,
    "maintenance": 0.5,
}

# Scenario fixed fall-detection probabilities
SCENARIO_FALL_PROBABILITIES = {
    "emergency": 0.8,
    "maintenance": 0.1,
}

# Reading variation applied to generated alerts (absolute points)
BATTERY_READING_VARIATION = 10
SIGNAL_READING_VARIATION = 15

# Synthetic reliability score
BASE_RELIABILITY = 95.0
RELIABILITY_BONUS_PER_HOUR = 0.1
MAX_RELIABILITY_BONUS = 3.0
EMERGENCY_RELIABILITY_MALUS = 2.0


# =============================================================================
# Geography
# =============================================================================


@dataclass(frozen=True)
class Zone:
    """Geographic partition of the device fleet."""

    id: int
    name: str
    lat: float
    lng: float

    @property
    def selector(self) -> str:
        """Identifier used by the operator controls (zone1, zone2...)."""
        return f"zone{self.id}"


PARIS_CENTER = (48.8566, 2.3522)
ZONE_RADIUS = 0.1
DEVICE_SPREAD = 0.001

ZONES = (
    Zone(1, "Zone 1 - Centre", 48.8566, 2.3522),
    Zone(2, "Zone 2 - Nord", 48.88, 2.3522),
    Zone(3, "Zone 3 - Sud", 48.83, 2.3522),
    Zone(4, "Zone 4 - Est", 48.8566, 2.38),
    Zone(5, "Zone 5 - Ouest", 48.8566, 2.32),
)

ANY_ZONE = "random"
DEFAULT_ZONE_NAME = ZONES[0].name
ZONE_NAMES_BY_SELECTOR = {zone.selector: zone.name for zone in ZONES}


# =============================================================================
# Devices
# =============================================================================

BATTERY_LOW = 20
BATTERY_CRITICAL = 10
SIGNAL_WEAK = 30
SIGNAL_CRITICAL = 10
BATTERY_DRAIN_RATE = 0.05
BATTERY_DRAIN_JITTER = 0.02
SIGNAL_VARIATION_RANGE = 3


# =============================================================================
# Alerts
# =============================================================================

ANY_ALERT_TYPE = "random"

PRIORITY_WEIGHTS = {
    "critical": 4,
    "high": 3,
    "medium": 2,
    "low": 1,
}

# Seconds
RESPONSE_TIME_TARGETS = {
    "critical": 120,
    "high": 180,
    "medium": 300,
    "low": 600,
}
DEFAULT_RESPONSE_TIME = 300
