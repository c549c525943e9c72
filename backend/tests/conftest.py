"""
Pytest configuration and shared fixtures.
"""

import random
import sys
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

# Add backend root to sys.path
sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from domain.models import Device, DeviceStatus
from services.api_gateway.dependencies import get_session
from services.api_gateway.main import app
from services.device_fleet import create_fleet
from services.simulation_manager import SimulationManager
from services.simulation_session import SimulationSession


class FakeClock:
    """Controllable clock injected into the simulation manager."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_device(
    device_id: str,
    zone: str = "Zone 1 - Centre",
    battery: float = 80.0,
    signal: float = 70.0,
) -> Device:
    return Device(
        id=device_id,
        name=f"Device {device_id}",
        latitude=48.8566,
        longitude=2.3522,
        battery_level=battery,
        signal_strength=signal,
        last_activity=datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc),
        status=DeviceStatus.ACTIVE,
        zone=zone,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def manager(rng, clock) -> SimulationManager:
    return SimulationManager(rng=rng, clock=clock)


@pytest.fixture
def devices() -> list[Device]:
    return [make_device(f"device_{i}") for i in range(1, 6)]


@pytest.fixture
def session(manager, clock) -> SimulationSession:
    fleet = create_fleet(100, random.Random(99), clock())
    return SimulationSession(manager, fleet, max_alerts_history=50, rng=random.Random(7))


@pytest.fixture
async def async_client(session) -> AsyncGenerator[AsyncClient, None]:
    """Async client bound to the test session."""
    app.dependency_overrides[get_session] = lambda: session
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides = {}


@pytest.fixture
def device_factory():
    return make_device
