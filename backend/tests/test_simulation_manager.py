"""
Tests for the simulation manager.
"""

import random
import threading
from datetime import timedelta

import pytest

from domain.models import AlertPriority, AlertStatus, AlertType, Scenario
from services.simulation_manager import SimulationManager, zone_name_for_selector


def generate_until(manager, devices, clock, count, step=1.0, max_calls=10_000):
    """Call generate_alert, advancing the clock, until `count` alerts exist."""
    alerts = []
    for _ in range(max_calls):
        alert = manager.generate_alert(devices)
        if alert is not None:
            alerts.append(alert)
            if len(alerts) == count:
                break
        clock.advance(step)
    return alerts


@pytest.fixture
def always(manager):
    """Manager that emits whenever the interval allows."""
    manager.update_parameters(alert_probability_override=1.0, alert_interval_seconds=1)
    return manager


# =============================================================================
# Gating and throttling
# =============================================================================


def test_paused_manager_never_generates(always, devices, clock):
    always.update_parameters(is_running=False)

    for _ in range(100):
        assert always.generate_alert(devices) is None
        clock.advance(60)

    assert always.stats.total_generated_alerts == 0
    assert always.stats.last_alert_time is None


def test_empty_roster_is_a_noop(always):
    assert always.generate_alert([]) is None
    assert always.tick([]) is None
    assert always.stats.total_generated_alerts == 0
    assert always.stats.last_alert_time is None


def test_first_generation_is_not_throttled(always, devices, clock):
    alert = always.generate_alert(devices)

    assert alert is not None
    assert always.stats.last_alert_time == clock()
    assert always.stats.total_generated_alerts == 1


def test_minimum_interval_between_alerts(always, devices, clock):
    always.update_parameters(alert_interval_seconds=5)
    first = always.generate_alert(devices)
    assert first is not None

    clock.advance(4.5)
    assert always.generate_alert(devices) is None
    assert always.stats.total_generated_alerts == 1

    clock.advance(0.5)
    assert always.generate_alert(devices) is not None
    assert always.stats.total_generated_alerts == 2


def test_successive_alerts_respect_interval(manager, devices, clock):
    manager.update_parameters(alert_interval_seconds=4, scenario="peak")

    alerts = generate_until(manager, devices, clock, count=40, step=0.7)

    assert len(alerts) == 40
    for previous, current in zip(alerts, alerts[1:]):
        assert (current.timestamp - previous.timestamp).total_seconds() >= 4


def test_should_generate_alert_does_not_touch_statistics(always, clock):
    assert always.should_generate_alert() is True
    assert always.stats.total_generated_alerts == 0
    assert always.stats.last_alert_time is None


def test_should_generate_alert_false_when_paused(always):
    always.update_parameters(is_running=False)
    assert always.should_generate_alert() is False


def test_concurrent_ticks_emit_once_per_interval(always, devices):
    barrier = threading.Barrier(4)
    results = []

    def worker():
        barrier.wait()
        results.extend(always.generate_alert(devices) for _ in range(200))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(1 for alert in results if alert is not None) == 1
    assert always.stats.total_generated_alerts == 1


# =============================================================================
# Probabilities
# =============================================================================


@pytest.mark.parametrize(
    "scenario,expected",
    [
        ("normal", 0.2),
        ("peak", 0.6),
        ("emergency", 1.0),
        ("maintenance", 0.1),
    ],
)
def test_alert_probability_by_scenario(manager, scenario, expected):
    manager.update_parameters(alert_probability_override=0.2, scenario=scenario)
    assert manager.get_alert_probability() == pytest.approx(expected)


def test_alert_probability_uses_base_constant(manager):
    assert manager.get_alert_probability() == pytest.approx(0.3)
    manager.update_parameters(scenario=Scenario.EMERGENCY)
    assert manager.get_alert_probability() == pytest.approx(1.5)


@pytest.mark.parametrize(
    "scenario,expected",
    [
        ("normal", 0.25),
        ("peak", 0.25),
        ("emergency", 0.8),
        ("maintenance", 0.1),
    ],
)
def test_fall_detection_probability_by_scenario(manager, scenario, expected):
    manager.update_parameters(fall_probability_override=0.25, scenario=scenario)
    assert manager.get_fall_detection_probability() == pytest.approx(expected)


def test_fall_detection_probability_default(manager):
    assert manager.get_fall_detection_probability() == pytest.approx(0.6)


def test_scenario_generation_rate_ordering(clock, devices):
    rates = {}
    for scenario in ("emergency", "peak", "normal", "maintenance"):
        manager = SimulationManager(rng=random.Random(42), clock=clock)
        manager.update_parameters(scenario=scenario, alert_interval_seconds=1)
        generated = 0
        for _ in range(3000):
            if manager.generate_alert(devices) is not None:
                generated += 1
            clock.advance(1)
        rates[scenario] = generated

    assert rates["emergency"] > rates["peak"] > rates["normal"] > rates["maintenance"]


# =============================================================================
# Alert construction
# =============================================================================


def test_fall_alerts_are_always_critical(always, devices, clock):
    alerts = generate_until(always, devices, clock, count=300)

    assert {a.type for a in alerts} == {AlertType.FALL_DETECTED, AlertType.BUTTON_PRESSED}
    for alert in alerts:
        if alert.type == AlertType.FALL_DETECTED:
            assert alert.priority == AlertPriority.CRITICAL
        else:
            assert alert.priority == AlertPriority.HIGH


def test_readings_are_clamped(always, clock, device_factory):
    roster = [
        device_factory("full", battery=99.0, signal=95.0),
        device_factory("empty", battery=1.0, signal=2.0),
    ]

    alerts = generate_until(always, roster, clock, count=300)

    for alert in alerts:
        assert 0 <= alert.battery_level <= 100
        assert 0 <= alert.signal_strength <= 100


def test_readings_vary_around_device_levels(always, clock, device_factory):
    roster = [device_factory("mid", battery=50.0, signal=50.0)]

    alerts = generate_until(always, roster, clock, count=200)

    for alert in alerts:
        assert abs(alert.battery_level - 50.0) <= 10
        assert abs(alert.signal_strength - 50.0) <= 15


def test_position_is_jittered_near_device(always, devices, clock):
    alerts = generate_until(always, devices, clock, count=200)

    for alert in alerts:
        assert abs(alert.latitude - 48.8566) <= 0.0016
        assert abs(alert.longitude - 2.3522) <= 0.0016
    assert any(a.latitude != 48.8566 for a in alerts)


def test_alert_initial_status_and_fields(always, devices, clock):
    alert = always.generate_alert(devices)

    assert alert.status == AlertStatus.RECEIVED
    assert alert.timestamp == clock()
    assert alert.device_id in {d.id for d in devices}
    assert alert.id.startswith("sim_alert_")


def test_alert_ids_are_unique_at_same_instant(always, devices):
    ids = {always.create_test_alert(devices).id for _ in range(1000)}
    assert len(ids) == 1000


def test_roster_is_not_mutated(always, devices, clock):
    before = list(devices)
    generate_until(always, devices, clock, count=20)
    assert devices == before


# =============================================================================
# Device selection
# =============================================================================


def test_zone_selector_picks_device_from_zone(always, clock, device_factory):
    zone_two = [device_factory(f"north_{i}", zone="Zone 2 - Nord") for i in range(10)]
    always.update_parameters(zone_selector="zone2")

    alerts = generate_until(always, zone_two, clock, count=1)

    assert alerts[0].device_id in {d.id for d in zone_two}


def test_zone_selector_filters_mixed_roster(always, clock, device_factory):
    roster = [device_factory(f"centre_{i}") for i in range(10)] + [
        device_factory(f"south_{i}", zone="Zone 3 - Sud") for i in range(3)
    ]
    always.update_parameters(zone_selector="zone3")

    alerts = generate_until(always, roster, clock, count=50)

    assert {a.device_id for a in alerts} <= {"south_0", "south_1", "south_2"}


def test_empty_zone_falls_back_to_full_roster(always, devices, clock):
    always.update_parameters(zone_selector="zone4")

    alert = always.generate_alert(devices)

    assert alert is not None
    assert alert.device_id in {d.id for d in devices}


def test_unknown_zone_selector_uses_default_zone(always, clock, device_factory):
    roster = [device_factory("centre_0")] + [
        device_factory(f"east_{i}", zone="Zone 4 - Est") for i in range(5)
    ]
    always.update_parameters(zone_selector="zone9")

    alerts = generate_until(always, roster, clock, count=30)

    assert zone_name_for_selector("zone9") == "Zone 1 - Centre"
    assert {a.device_id for a in alerts} == {"centre_0"}


# =============================================================================
# Forced types and priorities
# =============================================================================


def test_forced_button_type_under_normal_scenario(always, devices, clock):
    always.update_parameters(alert_type_selector="BUTTON_PRESSED")

    alerts = generate_until(always, devices, clock, count=100)

    assert len(alerts) == 100
    assert all(a.type == AlertType.BUTTON_PRESSED for a in alerts)
    assert all(a.priority == AlertPriority.HIGH for a in alerts)


@pytest.mark.parametrize(
    "scenario,priority",
    [
        ("emergency", AlertPriority.HIGH),
        ("maintenance", AlertPriority.LOW),
        ("peak", AlertPriority.HIGH),
    ],
)
def test_button_priority_by_scenario(always, devices, clock, scenario, priority):
    always.update_parameters(alert_type_selector=AlertType.BUTTON_PRESSED, scenario=scenario)

    alerts = generate_until(always, devices, clock, count=20)

    assert len(alerts) == 20
    assert all(a.priority == priority for a in alerts)


def test_forced_fall_type_is_critical_in_maintenance(always, devices, clock):
    always.update_parameters(alert_type_selector="FALL_DETECTED", scenario="maintenance")

    alerts = generate_until(always, devices, clock, count=20)

    assert all(a.priority == AlertPriority.CRITICAL for a in alerts)


# =============================================================================
# Parameters
# =============================================================================


def test_update_parameters_is_a_partial_merge(manager):
    manager.update_parameters(zone_selector="zone3")
    manager.update_parameters(alert_interval_seconds=10)

    assert manager.params.zone_selector == "zone3"
    assert manager.params.alert_interval_seconds == 10
    assert manager.params.scenario == Scenario.NORMAL
    assert manager.params.is_running is True


def test_scenario_change_stamps_scenario_start(manager, clock):
    manager.update_parameters(zone_selector="zone2")
    assert manager.stats.scenario_start_time is None

    clock.advance(30)
    manager.update_parameters(scenario="peak")
    assert manager.stats.scenario_start_time == clock()
    assert manager.params.scenario == Scenario.PEAK


def test_overrides_are_clamped(manager):
    manager.update_parameters(alert_probability_override=-0.5, fall_probability_override=1.7)

    assert manager.params.alert_probability_override == 0.0
    assert manager.params.fall_probability_override == 1.0


def test_interval_is_at_least_one_second(manager):
    manager.update_parameters(alert_interval_seconds=0)
    assert manager.params.alert_interval_seconds == 1

    manager.update_parameters(alert_interval_seconds=-3)
    assert manager.params.alert_interval_seconds == 1


def test_override_can_be_cleared(manager):
    manager.update_parameters(alert_probability_override=0.9)
    manager.update_parameters(alert_probability_override=None)

    assert manager.params.alert_probability_override is None
    assert manager.get_alert_probability() == pytest.approx(0.3)


def test_zero_override_disables_generation(manager, devices, clock):
    manager.update_parameters(alert_probability_override=0.0)

    assert generate_until(manager, devices, clock, count=1, max_calls=200) == []


def test_unknown_parameter_is_rejected(manager):
    with pytest.raises(TypeError):
        manager.update_parameters(alert_frequency=3)


def test_unknown_scenario_is_rejected(manager):
    with pytest.raises(ValueError):
        manager.update_parameters(scenario="holiday")


def test_unknown_alert_type_selector_is_rejected(always, devices):
    with pytest.raises(ValueError):
        always.update_parameters(alert_type_selector="FALL")

    assert always.params.alert_type_selector == "random"
    assert always.generate_alert(devices) is not None
    assert always.stats.total_generated_alerts == 1


def test_rejected_update_changes_nothing(manager):
    before = manager.get_state()

    with pytest.raises(ValueError):
        manager.update_parameters(is_running=False, scenario="bogus")

    assert manager.params == before.params
    assert manager.params.is_running is True
    assert manager.stats.scenario_start_time is None


def test_failed_generation_leaves_statistics_untouched(always, devices, clock):
    # Bypasses update_parameters validation
    always.params.alert_type_selector = "FALL"

    with pytest.raises(ValueError):
        always.generate_alert(devices)

    assert always.stats.total_generated_alerts == 0
    assert always.stats.last_alert_time is None

    always.params.alert_type_selector = "random"
    alert = always.generate_alert(devices)
    assert alert is not None
    assert always.stats.last_alert_time == clock()


def test_get_state_is_a_detached_snapshot(manager):
    state = manager.get_state()
    state.params.zone_selector = "zone5"
    state.stats.total_generated_alerts = 42

    assert manager.params.zone_selector == "random"
    assert manager.stats.total_generated_alerts == 0


# =============================================================================
# Scheduling and derived metrics
# =============================================================================


@pytest.mark.parametrize(
    "scenario,interval",
    [
        ("normal", 3000),
        ("peak", 1500),
        ("emergency", 1000),
        ("maintenance", 3000),
    ],
)
def test_simulation_interval_by_scenario(manager, scenario, interval):
    manager.update_parameters(scenario=scenario)
    assert manager.get_simulation_interval_ms() == interval


def test_uptime_formatting(manager, clock):
    assert manager.get_uptime() == "0m"

    clock.advance(59 * 60 + 59)
    assert manager.get_uptime() == "59m"

    clock.advance(1 + 5 * 60 + 3600)
    assert manager.get_uptime() == "2h5m"


def test_events_per_hour(always, devices, clock):
    assert always.get_events_per_hour() == 0

    start = always.stats.start_time
    generate_until(always, devices, clock, count=6)
    clock.now = start + timedelta(hours=2)

    assert always.get_events_per_hour() == 3


def test_system_reliability(manager, clock):
    assert manager.get_system_reliability() == "95.0"

    clock.advance(10 * 3600)
    assert manager.get_system_reliability() == "96.0"

    clock.advance(30 * 3600)
    assert manager.get_system_reliability() == "98.0"

    manager.update_parameters(scenario="emergency")
    assert manager.get_system_reliability() == "96.0"


def test_reset_clears_statistics_only(always, devices, clock):
    always.update_parameters(zone_selector="zone2", scenario="peak")
    alerts = generate_until(always, devices, clock, count=5)
    assert len(alerts) == 5
    clock.advance(3 * 3600)

    always.reset()

    assert always.stats.total_generated_alerts == 0
    assert always.stats.last_alert_time is None
    assert always.stats.scenario_start_time is None
    assert always.stats.start_time == clock()
    assert always.get_uptime() == "0m"
    assert always.params.zone_selector == "zone2"
    assert always.params.scenario == Scenario.PEAK


def test_counter_is_monotonic_between_resets(always, devices, clock):
    previous = 0
    for _ in range(200):
        always.generate_alert(devices)
        assert always.stats.total_generated_alerts >= previous
        previous = always.stats.total_generated_alerts
        clock.advance(0.4)

    assert previous > 0


# =============================================================================
# Manual alerts
# =============================================================================


def test_test_alert_bypasses_throttle(always, devices):
    always.update_parameters(is_running=False)

    first = always.create_test_alert(devices)
    second = always.create_test_alert(devices)

    assert first is not None and second is not None
    assert first.id.startswith("test_alert_")
    assert always.stats.total_generated_alerts == 2
    assert always.stats.last_alert_time is None


def test_test_alert_with_explicit_fields(manager, devices):
    alert = manager.create_test_alert(
        devices,
        alert_type=AlertType.BUTTON_PRESSED,
        priority=AlertPriority.LOW,
        jitter=False,
    )

    device = next(d for d in devices if d.id == alert.device_id)
    assert alert.priority == AlertPriority.LOW
    assert alert.latitude == device.latitude
    assert alert.battery_level == device.battery_level


def test_test_alert_without_devices(manager):
    assert manager.create_test_alert([]) is None
    assert manager.stats.total_generated_alerts == 0
