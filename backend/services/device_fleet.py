"""
Device Fleet.

Builds the simulated roster and drifts battery/signal levels between ticks.
The simulation manager only reads the roster produced here.
"""

import random
from dataclasses import replace
from datetime import datetime, timedelta

from domain.models import Device, DeviceStatus
from services.device_status import calculate_device_status
from shared_libraries.constants import (
    BATTERY_DRAIN_JITTER,
    BATTERY_DRAIN_RATE,
    SIGNAL_CRITICAL,
    SIGNAL_VARIATION_RANGE,
    ZONE_RADIUS,
    ZONES,
)

ALL = "all"


def calculate_zone_for_device(index: int) -> str:
    """Zone name for the device at the given roster index."""
    zone_index = index // (len(ZONES) * 4)
    return ZONES[zone_index % len(ZONES)].name


def generate_device_position(zone_index: int, rng: random.Random) -> tuple[float, float]:
    """Random position around the anchor of a zone."""
    zone = ZONES[zone_index % len(ZONES)]
    return (
        zone.lat + (rng.random() - 0.5) * ZONE_RADIUS,
        zone.lng + (rng.random() - 0.5) * ZONE_RADIUS,
    )


def create_fleet(count: int, rng: random.Random, now: datetime) -> list[Device]:
    """Create the initial roster of `count` devices spread across zones."""
    devices = []
    for i in range(count):
        zone_index = i // (len(ZONES) * 4)
        lat, lng = generate_device_position(zone_index, rng)
        battery = float(int(rng.random() * 100))
        signal = float(int(rng.random() * 100))
        devices.append(
            Device(
                id=f"device_{i + 1}",
                name=f"Device {i + 1}",
                latitude=lat,
                longitude=lng,
                battery_level=battery,
                signal_strength=signal,
                last_activity=now - timedelta(seconds=rng.random() * 3600),
                status=calculate_device_status(battery, signal),
                zone=calculate_zone_for_device(i),
            )
        )
    return devices


def update_device_battery(current_level: float, rng: random.Random) -> float:
    drain = BATTERY_DRAIN_RATE + rng.random() * BATTERY_DRAIN_JITTER
    return max(0.0, current_level - drain)


def update_device_signal(current_strength: float, rng: random.Random) -> float:
    variation = (rng.random() - 0.5) * SIGNAL_VARIATION_RANGE
    return max(float(SIGNAL_CRITICAL), min(100.0, current_strength + variation))


def drift_fleet(devices: list[Device], rng: random.Random) -> list[Device]:
    """Return a new roster with drifted levels and recomputed statuses."""
    drifted = []
    for device in devices:
        battery = update_device_battery(device.battery_level, rng)
        signal = update_device_signal(device.signal_strength, rng)
        drifted.append(
            replace(
                device,
                battery_level=battery,
                signal_strength=signal,
                status=calculate_device_status(battery, signal),
            )
        )
    return drifted


def filter_devices(
    devices: list[Device],
    search: str | None = None,
    status: str | None = None,
    zone: str | None = None,
) -> list[Device]:
    """Filter the roster the way the device list does.

    `search` matches id or name case-insensitively; `None` or "all"
    disables the status and zone filters.
    """
    term = (search or "").lower()
    result = []
    for device in devices:
        if term and term not in device.name.lower() and term not in device.id.lower():
            continue
        if status not in (None, ALL) and device.status.value != status:
            continue
        if zone not in (None, ALL) and device.zone != zone:
            continue
        result.append(device)
    return result


def count_by_status(devices: list[Device]) -> dict[str, int]:
    """Number of devices per status, every status present."""
    counts = {status.value: 0 for status in DeviceStatus}
    for device in devices:
        counts[device.status.value] += 1
    return counts
