"""
Headless Simulation Runner - prints generated alerts as JSON lines.

Usage:
    python -m services.simulation_cli --ticks 200 --scenario peak --seed 7

By default time is simulated: each tick advances a virtual clock by the
manager's polling interval, so hours of dashboard activity run instantly.
Use --realtime to sleep between ticks instead.
"""

import argparse
import json
import random
import signal
import sys
import time
from dataclasses import asdict
from datetime import datetime, timedelta, timezone

from domain.models import Alert, Scenario
from services.device_fleet import create_fleet
from services.simulation_manager import SimulationManager, utcnow
from services.simulation_session import SimulationSession
from shared_libraries.config import get_settings
from shared_libraries.constants import ANY_ALERT_TYPE, ANY_ZONE, DEVICE_COUNT, ZONES
from shared_libraries.logging import get_logger, setup_logging

logger = get_logger(__name__)


class SimulatedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def alert_to_json(alert: Alert) -> str:
    return json.dumps(asdict(alert), default=str)


class SimulationRunner:
    """Drive a session for a number of ticks."""

    def __init__(self, session: SimulationSession, clock: SimulatedClock | None):
        self.session = session
        self.clock = clock
        self.running = True

    def run(self, ticks: int, out=None) -> int:
        """Run up to `ticks` ticks and return the number of alerts emitted."""
        out = out or sys.stdout
        emitted = 0
        for _ in range(ticks):
            if not self.running:
                break

            alert = self.session.tick()
            if alert is not None:
                emitted += 1
                print(alert_to_json(alert), file=out)

            interval = self.session.manager.get_simulation_interval_ms() / 1000
            if self.clock is not None:
                self.clock.advance(interval)
            else:
                time.sleep(interval)
        return emitted

    def stop(self):
        self.running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Alert Network Simulation Runner")
    parser.add_argument("--ticks", type=int, default=100, help="Number of ticks to run")
    parser.add_argument(
        "--scenario",
        choices=[s.value for s in Scenario],
        default=Scenario.NORMAL.value,
        help="Simulation scenario",
    )
    parser.add_argument(
        "--zone",
        choices=[ANY_ZONE] + [z.selector for z in ZONES],
        default=ANY_ZONE,
        help="Restrict alerts to a zone",
    )
    parser.add_argument(
        "--type",
        dest="alert_type",
        choices=[ANY_ALERT_TYPE, "FALL_DETECTED", "BUTTON_PRESSED"],
        default=ANY_ALERT_TYPE,
        help="Force the alert type",
    )
    parser.add_argument("--interval", type=int, default=3, help="Minimum seconds between alerts")
    parser.add_argument("--devices", type=int, default=DEVICE_COUNT, help="Number of devices")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--realtime", action="store_true", help="Sleep between ticks")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(service_name="simulation-cli", log_level=settings.effective_log_level)

    clock = None if args.realtime else SimulatedClock()
    rng = random.Random(args.seed)
    manager = SimulationManager(rng=rng, clock=clock or utcnow)
    manager.update_parameters(
        alert_interval_seconds=args.interval,
        zone_selector=args.zone,
        alert_type_selector=args.alert_type,
        scenario=args.scenario,
    )
    devices = create_fleet(args.devices, rng, manager.stats.start_time)
    session = SimulationSession(manager, devices, settings.max_alerts_history, rng)

    runner = SimulationRunner(session, clock)

    def signal_handler(sig, frame):
        runner.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("simulation_cli_started", ticks=args.ticks, scenario=args.scenario)
    runner.run(args.ticks)

    print(json.dumps({"summary": session.dashboard_stats()}), file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
