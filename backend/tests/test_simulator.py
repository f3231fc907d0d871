"""Tests for the vehicle simulator state machine."""

import pytest

from transit_tracker.core.broadcaster import Broadcaster
from transit_tracker.core.ingest import TelemetryIngestor
from transit_tracker.core.scheduler import SIMULATOR_JOB_ID
from transit_tracker.core.simulator import FORWARD, REVERSE, SimState, Simulator
from transit_tracker.core.state import TransitState
from transit_tracker.exceptions import RouteNotFoundError, ValidationError, VehicleNotFoundError
from transit_tracker.schemas.route import Route
from transit_tracker.schemas.simulation import SimulatedVehicleConfig

# Three waypoints ~1.1 km apart along the equator
LINE = Route(
    id="R1",
    stops=[
        {"id": "A", "name": "A", "lat": 0.0, "lon": 0.0},
        {"id": "B", "name": "B", "lat": 0.0, "lon": 0.01},
        {"id": "C", "name": "C", "lat": 0.0, "lon": 0.02},
    ],
)


class FakeScheduler:
    """Records jobs the way AsyncIOScheduler would hold them."""

    def __init__(self) -> None:
        self.jobs: dict[str, dict] = {}

    def add_job(self, func, trigger, **kwargs):
        self.jobs[kwargs["id"]] = {"func": func, "trigger": trigger, **kwargs}

    def get_job(self, job_id):
        return self.jobs.get(job_id)

    def remove_job(self, job_id):
        del self.jobs[job_id]


def make_simulator(*configs: SimulatedVehicleConfig, dwell: float = 0.0, scheduler=None) -> Simulator:
    state = TransitState.from_seed([LINE])
    ingestor = TelemetryIngestor(state, Broadcaster())
    return Simulator(
        state, ingestor, list(configs), tick_seconds=2.0, dwell_seconds=dwell, scheduler=scheduler,
    )


def fast(vehicle_id: str = "SIM-1", **kwargs) -> SimulatedVehicleConfig:
    return SimulatedVehicleConfig(vehicle_id=vehicle_id, route_id="R1", speed_kmph=5000, **kwargs)


@pytest.mark.asyncio
async def test_turns_around_at_terminus():
    sim = make_simulator(fast())
    sim.start()
    await sim.tick()
    await sim.tick()

    v = sim.vehicles["SIM-1"]
    assert v.waypoint_index == 2
    assert v.direction == REVERSE
    assert v.next_index == 1
    assert (v.lat, v.lon) == (0.0, 0.02)


@pytest.mark.asyncio
async def test_reverse_start_at_first_waypoint_flips_forward():
    sim = make_simulator(fast(direction="reverse"))
    sim.start()
    v = sim.vehicles["SIM-1"]
    assert v.direction == FORWARD
    assert v.next_index == 1


@pytest.mark.asyncio
async def test_dwell_counts_down_in_ticks():
    sim = make_simulator(fast(), dwell=4.0)
    sim.start()
    v = sim.vehicles["SIM-1"]

    await sim.tick()  # arrives at B
    assert v.state is SimState.DWELLING
    assert v.waypoint_index == 1
    record = sim.state.vehicles.get("SIM-1")
    assert record.speed_kmph == 0.0
    assert record.status == "stopped"
    assert record.moving is False

    await sim.tick()  # 2 s left
    assert v.state is SimState.DWELLING
    assert v.dwell_remaining_s == pytest.approx(2.0)

    await sim.tick()  # leaves and reaches C
    assert v.waypoint_index == 2


@pytest.mark.asyncio
async def test_partial_step_interpolates_toward_next_waypoint():
    sim = make_simulator(SimulatedVehicleConfig(vehicle_id="SIM-1", route_id="R1", speed_kmph=36))
    sim.start()
    await sim.tick()

    v = sim.vehicles["SIM-1"]
    assert v.state is SimState.MOVING
    assert v.waypoint_index == 0
    assert 0.0 < v.lon < 0.001
    assert v.lat == pytest.approx(0.0)
    assert v.heading == pytest.approx(90.0, abs=0.01)

    record = sim.state.vehicles.get("SIM-1")
    assert record.simulated is True
    assert record.route_id == "R1"
    assert record.resolved_route_id == "R1"
    assert record.speed_kmph == 36


def test_unknown_route_vehicle_is_skipped():
    sim = make_simulator(fast(), SimulatedVehicleConfig(vehicle_id="LOST", route_id="R404"))
    sim.start()
    assert set(sim.vehicles) == {"SIM-1"}


def test_add_and_remove_vehicle():
    sim = make_simulator()
    sim.add_vehicle(fast("SIM-2", start_index=1))
    assert sim.vehicles["SIM-2"].waypoint_index == 1

    with pytest.raises(RouteNotFoundError):
        sim.add_vehicle(SimulatedVehicleConfig(vehicle_id="X", route_id="nope"))

    sim.remove_vehicle("SIM-2")
    assert sim.status().vehicles == []
    with pytest.raises(VehicleNotFoundError):
        sim.remove_vehicle("SIM-2")


def test_start_stop_manages_job():
    scheduler = FakeScheduler()
    sim = make_simulator(fast(), scheduler=scheduler)
    sim.start()
    assert sim.running
    assert scheduler.jobs[SIMULATOR_JOB_ID]["seconds"] == 2.0

    sim.stop()
    assert not sim.running
    assert SIMULATOR_JOB_ID not in scheduler.jobs
    # vehicles stay visible after stopping
    assert sim.status().vehicles[0].vehicle_id == "SIM-1"


def test_speed_multiplier_reschedules():
    scheduler = FakeScheduler()
    sim = make_simulator(fast(), scheduler=scheduler)
    sim.start()
    sim.set_speed_multiplier(2.0)

    assert sim.interval_seconds == pytest.approx(1.0)
    assert scheduler.jobs[SIMULATOR_JOB_ID]["seconds"] == pytest.approx(1.0)
    assert sim.status().speed_multiplier == 2.0


def test_speed_multiplier_out_of_range():
    sim = make_simulator()
    with pytest.raises(ValidationError):
        sim.set_speed_multiplier(0.05)
    with pytest.raises(ValidationError):
        sim.set_speed_multiplier(11)
    assert sim.speed_multiplier == 1.0


def test_speed_multiplier_while_stopped_has_no_job():
    scheduler = FakeScheduler()
    sim = make_simulator(scheduler=scheduler)
    sim.set_speed_multiplier(0.5)
    assert scheduler.jobs == {}
    assert sim.interval_seconds == pytest.approx(4.0)
