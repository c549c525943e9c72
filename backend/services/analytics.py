"""
Dashboard analytics.

Aggregations over the alert history and roster consumed by the analytics
charts and the headline stats cards.
"""

from collections import Counter
from typing import Any

from domain.models import (
    Alert,
    AlertPriority,
    AlertStatus,
    AlertType,
    Device,
    DeviceStatus,
)
from shared_libraries.constants import DEFAULT_RESPONSE_TIME, RESPONSE_TIME_TARGETS


def calculate_response_time(alerts: list[Alert]) -> int:
    """Mean response time target (seconds) over resolved alerts."""
    resolved = [a for a in alerts if a.status == AlertStatus.RESOLVED]
    if not resolved:
        return 0

    total = sum(
        RESPONSE_TIME_TARGETS.get(a.priority.value, DEFAULT_RESPONSE_TIME)
        for a in resolved
    )
    return round(total / len(resolved))


def calculate_active_devices_percentage(devices: list[Device]) -> int:
    if not devices:
        return 0
    active = sum(1 for d in devices if d.status == DeviceStatus.ACTIVE)
    return round(active / len(devices) * 100)


def get_alerts_by_hour(alerts: list[Alert]) -> list[dict[str, Any]]:
    """Alert counts for each hour of the day (UTC)."""
    counts = [0] * 24
    for alert in alerts:
        counts[alert.timestamp.hour] += 1
    return [{"hour": f"{hour}h", "alerts": count} for hour, count in enumerate(counts)]


def _zone_trend(count: int) -> str:
    if count > 5:
        return "up"
    if count < 2:
        return "down"
    return "stable"


def get_alerts_by_zone(alerts: list[Alert], devices: list[Device]) -> list[dict[str, Any]]:
    """Alert counts per zone of the source device.

    Alerts whose device is not in the roster (manual test devices) are
    left out.
    """
    zone_by_device = {d.id: d.zone for d in devices}
    counts: dict[str, int] = {}
    for alert in alerts:
        zone = zone_by_device.get(alert.device_id)
        if zone is not None:
            counts[zone] = counts.get(zone, 0) + 1

    return [
        {"zone": zone, "alerts": count, "trend": _zone_trend(count)}
        for zone, count in counts.items()
    ]


def get_alerts_by_type(alerts: list[Alert]) -> dict[str, int]:
    counts = Counter(a.type.value for a in alerts)
    return {t.value: counts.get(t.value, 0) for t in AlertType}


def get_alerts_by_priority(alerts: list[Alert]) -> dict[str, int]:
    counts = Counter(a.priority.value for a in alerts)
    return {p.value: counts.get(p.value, 0) for p in AlertPriority}


def get_alerts_by_status(alerts: list[Alert]) -> dict[str, int]:
    counts = Counter(a.status.value for a in alerts)
    return {s.value: counts.get(s.value, 0) for s in AlertStatus}
