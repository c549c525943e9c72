"""
Simulation control endpoints.

Operator controls of the dashboard: parameters, start/pause, reset,
canned scenarios and manual test alerts.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from domain.models import Scenario
from services.api_gateway.dependencies import get_session
from services.api_gateway.routes.websocket import broadcast_alert
from services.api_gateway.schemas import (
    AlertResponse,
    DashboardStatsResponse,
    ManualAlertRequest,
    ScenarioResponse,
    SimulationParametersUpdate,
    SimulationStateResponse,
    TickResponse,
)
from services.simulation_session import SimulationSession

router = APIRouter()

OVERRIDE_FIELDS = ("alert_probability_override", "fall_probability_override")


def build_state(session: SimulationSession) -> SimulationStateResponse:
    manager = session.manager
    state = manager.get_state()
    return SimulationStateResponse.model_validate(
        {
            "params": state.params,
            "stats": state.stats,
            "simulation_interval_ms": manager.get_simulation_interval_ms(),
            "alert_probability": manager.get_alert_probability(),
            "fall_detection_probability": manager.get_fall_detection_probability(),
        },
        from_attributes=True,
    )


@router.get("/state", response_model=SimulationStateResponse)
async def get_simulation_state(session: SimulationSession = Depends(get_session)):
    """Current parameters, statistics and derived probabilities."""
    return build_state(session)


@router.patch("/parameters", response_model=SimulationStateResponse)
async def update_simulation_parameters(
    payload: SimulationParametersUpdate,
    session: SimulationSession = Depends(get_session),
):
    """Merge the supplied parameters. Overrides may be cleared with null."""
    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or name in OVERRIDE_FIELDS
    }
    session.manager.update_parameters(**changes)
    return build_state(session)


@router.post("/start", response_model=SimulationStateResponse)
async def start_simulation(session: SimulationSession = Depends(get_session)):
    session.manager.update_parameters(is_running=True)
    return build_state(session)


@router.post("/pause", response_model=SimulationStateResponse)
async def pause_simulation(session: SimulationSession = Depends(get_session)):
    session.manager.update_parameters(is_running=False)
    return build_state(session)


@router.post("/reset", response_model=SimulationStateResponse)
async def reset_simulation(session: SimulationSession = Depends(get_session)):
    """Clear statistics and alert history. Parameters are kept."""
    session.reset()
    return build_state(session)


@router.post("/tick", response_model=TickResponse)
async def tick_simulation(session: SimulationSession = Depends(get_session)):
    """Run one generation check immediately."""
    alert = session.tick()
    if alert is None:
        return TickResponse(alert=None)

    await broadcast_alert(alert)
    return TickResponse(alert=AlertResponse.model_validate(alert))


@router.post("/scenarios/{scenario}", response_model=ScenarioResponse)
async def run_scenario(
    scenario: Scenario,
    session: SimulationSession = Depends(get_session),
):
    """Switch scenario and inject its canned alerts."""
    alerts = session.trigger_scenario(scenario)
    for alert in alerts:
        await broadcast_alert(alert)
    return ScenarioResponse(
        scenario=scenario,
        alerts=[AlertResponse.model_validate(a) for a in alerts],
    )


@router.post(
    "/test-alert",
    response_model=AlertResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_test_alert(
    payload: ManualAlertRequest | None = None,
    session: SimulationSession = Depends(get_session),
):
    """Generate a manual alert outside the automatic schedule."""
    payload = payload or ManualAlertRequest()
    alert = session.generate_test_alert(
        zone_selector=payload.zone_selector, alert_type=payload.alert_type
    )
    if alert is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No devices available to generate an alert",
        )

    await broadcast_alert(alert)
    return alert


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(session: SimulationSession = Depends(get_session)):
    """Headline dashboard statistics."""
    return session.dashboard_stats()
