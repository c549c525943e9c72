"""Device status classification from battery and signal levels."""

from domain.models import DeviceStatus
from shared_libraries.constants import BATTERY_CRITICAL, BATTERY_LOW, SIGNAL_WEAK


def calculate_device_status(battery_level: float, signal_strength: float) -> DeviceStatus:
    """Map battery/signal levels to a device status.

    Battery takes precedence over signal: a device with a drained battery is
    reported as inactive or low_battery whatever its signal strength.
    """
    if battery_level <= BATTERY_CRITICAL:
        return DeviceStatus.INACTIVE
    if battery_level <= BATTERY_LOW:
        return DeviceStatus.LOW_BATTERY
    if signal_strength <= SIGNAL_WEAK:
        return DeviceStatus.WEAK_SIGNAL
    return DeviceStatus.ACTIVE
