"""
Simulation Worker.

Runs as a background task that ticks the simulation session at the interval
chosen by the simulation manager.
"""

import asyncio
from typing import Awaitable, Callable

from domain.models import Alert
from services.simulation_session import SimulationSession
from shared_libraries.logging import get_logger

logger = get_logger(__name__)

AlertCallback = Callable[[Alert], Awaitable[None]]


async def run_simulation_tick(
    session: SimulationSession, on_alert: AlertCallback | None = None
) -> Alert | None:
    """Tick once and hand any new alert to the callback."""
    alert = session.tick()
    if alert is not None and on_alert is not None:
        await on_alert(alert)
    return alert


async def run_simulation_worker(
    session: SimulationSession,
    on_alert: AlertCallback | None = None,
    max_ticks: int | None = None,
) -> None:
    """Start the background tick loop.

    The interval is re-read after every tick so a scenario change takes
    effect on the next sleep.
    """
    logger.info("simulation_worker_starting")
    ticks = 0
    while True:
        try:
            await run_simulation_tick(session, on_alert)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("simulation_tick_failed", error=str(e))

        ticks += 1
        if max_ticks is not None and ticks >= max_ticks:
            break
        await asyncio.sleep(session.manager.get_simulation_interval_ms() / 1000)

    logger.info("simulation_worker_stopped", ticks=ticks)
