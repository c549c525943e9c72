"""
Tests for the simulated device fleet.
"""

import random
from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone

from domain.models import DeviceStatus
from services.device_fleet import (
    calculate_zone_for_device,
    count_by_status,
    create_fleet,
    drift_fleet,
    filter_devices,
    update_device_battery,
    update_device_signal,
)
from services.device_status import calculate_device_status

NOW = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def test_zone_assignment_by_index():
    assert calculate_zone_for_device(0) == "Zone 1 - Centre"
    assert calculate_zone_for_device(19) == "Zone 1 - Centre"
    assert calculate_zone_for_device(20) == "Zone 2 - Nord"
    assert calculate_zone_for_device(99) == "Zone 5 - Ouest"
    assert calculate_zone_for_device(100) == "Zone 1 - Centre"


def test_create_fleet_spreads_devices_over_zones():
    fleet = create_fleet(100, random.Random(1), NOW)

    assert len(fleet) == 100
    assert fleet[0].id == "device_1"
    assert fleet[-1].name == "Device 100"
    assert set(Counter(d.zone for d in fleet).values()) == {20}
    for device in fleet:
        assert 0 <= device.battery_level < 100
        assert 0 <= device.signal_strength < 100
        assert device.status == calculate_device_status(
            device.battery_level, device.signal_strength
        )
        assert device.last_activity <= NOW


def test_create_fleet_is_reproducible_with_seed():
    first = create_fleet(10, random.Random(5), NOW)
    second = create_fleet(10, random.Random(5), NOW)
    assert first == second


def test_battery_drains_and_never_goes_negative():
    rng = random.Random(3)
    level = update_device_battery(50.0, rng)
    assert 49.93 <= level <= 49.95

    assert update_device_battery(0.01, rng) == 0.0


def test_signal_stays_in_bounds():
    rng = random.Random(3)
    for _ in range(200):
        assert 10 <= update_device_signal(10.5, rng) <= 100
        assert 10 <= update_device_signal(99.5, rng) <= 100


def test_drift_fleet_returns_new_records():
    fleet = create_fleet(20, random.Random(2), NOW)
    snapshot = list(fleet)

    drifted = drift_fleet(fleet, random.Random(4))

    assert fleet == snapshot
    assert [d.id for d in drifted] == [d.id for d in fleet]
    for before, after in zip(fleet, drifted):
        assert after.battery_level < before.battery_level or before.battery_level == 0
        assert after.status == calculate_device_status(after.battery_level, after.signal_strength)


def test_filter_devices(device_factory):
    roster = [
        device_factory("device_1"),
        device_factory("device_2", zone="Zone 2 - Nord"),
        device_factory("device_13", zone="Zone 2 - Nord", battery=15),
    ]
    roster[2] = replace(roster[2], status=DeviceStatus.LOW_BATTERY)

    assert len(filter_devices(roster)) == 3
    assert [d.id for d in filter_devices(roster, search="DEVICE_1")] == ["device_1", "device_13"]
    assert [d.id for d in filter_devices(roster, zone="Zone 2 - Nord")] == ["device_2", "device_13"]
    assert [d.id for d in filter_devices(roster, status="low_battery")] == ["device_13"]
    assert len(filter_devices(roster, status="all", zone="all")) == 3


def test_count_by_status(device_factory):
    roster = [device_factory("a"), device_factory("b")]

    counts = count_by_status(roster)

    assert counts == {"active": 2, "inactive": 0, "low_battery": 0, "weak_signal": 0}
