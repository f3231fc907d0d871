"""API tests against an app wired with in-memory services."""

import orjson
from fastapi.testclient import TestClient

from transit_tracker.config import Settings
from transit_tracker.core.seed import NetworkConfig, default_network
from transit_tracker.main import create_app
from transit_tracker.schemas.route import Route
from transit_tracker.schemas.simulation import SimulatedVehicleConfig
from transit_tracker.services import build_services


def make_client(network: NetworkConfig | None = None) -> TestClient:
    settings = Settings(mqtt_url="", redis_url="", simulation_autostart=False)
    if network is None:
        network = NetworkConfig(
            routes=[
                Route(
                    id="R1",
                    name="Main Line",
                    stops=[
                        {"id": "S1", "name": "First", "lat": 0.0, "lon": 0.0},
                        {"id": "S2", "name": "Second", "lat": 0.0, "lon": 1.0},
                    ],
                ),
            ],
            vehicle_routes={"BUS-1": "R1"},
            simulated_vehicles=[SimulatedVehicleConfig(vehicle_id="SIM-1", route_id="R1")],
        )
    services = build_services(settings, network)
    return TestClient(create_app(settings, services))


def test_health():
    with make_client() as client:
        resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["mqtt"] == "disabled"
    assert body["simulation"] == "stopped"


def test_nearest_stop_rejects_non_numeric():
    with make_client() as client:
        resp = client.get("/api/stops/nearest", params={"lat": "abc", "lon": "72.5"})
    assert resp.status_code == 422


def test_nearest_stop_rejects_out_of_range():
    with make_client() as client:
        resp = client.get("/api/stops/nearest", params={"lat": "95", "lon": "0"})
    assert resp.status_code == 422


def test_nearest_stop():
    with make_client() as client:
        resp = client.get("/api/stops/nearest", params={"lat": "0.0", "lon": "0.009"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["stop"]["id"] == "S1"
    assert body["route_id"] == "R1"
    assert body["walk_minutes"] == 12


def test_nearest_stop_outside_radius():
    with make_client() as client:
        resp = client.get("/api/stops/nearest", params={"lat": 5, "lon": 5, "max_distance_m": 500})
    assert resp.status_code == 404


def test_nearest_stop_empty_registry():
    with make_client(NetworkConfig()) as client:
        resp = client.get("/api/stops/nearest", params={"lat": 0, "lon": 0})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No stops registered"


def test_added_route_is_immediately_visible():
    with make_client() as client:
        resp = client.post("/api/admin/routes", json={
            "id": "R9",
            "name": "Loop",
            "stops": [{"id": "S90", "name": "Depot", "lat": 12.0, "lon": 77.0}],
        })
        assert resp.status_code == 200

        route_ids = [r["id"] for r in client.get("/api/routes").json()]
        nearest = client.get("/api/stops/nearest", params={"lat": 12.0001, "lon": 77.0001}).json()
    assert route_ids == ["R1", "R9"]
    assert nearest["stop"]["id"] == "S90"
    assert nearest["route_id"] == "R9"


def test_add_route_duplicate_seq_rejected():
    with make_client() as client:
        resp = client.post("/api/admin/routes", json={
            "id": "R9",
            "stops": [
                {"id": "A", "lat": 0, "lon": 0, "seq": 1},
                {"id": "B", "lat": 0, "lon": 1, "seq": 1},
            ],
        })
    assert resp.status_code == 422


def test_unknown_ids_are_404():
    with make_client() as client:
        stop = client.get("/api/stops/NOPE")
        route = client.get("/api/routes/NOPE")
        vehicle = client.get("/api/vehicles/NOPE")
    assert stop.status_code == 404
    assert stop.json()["detail"] == "Stop not found: NOPE"
    assert route.status_code == 404
    assert vehicle.status_code == 404


def test_stop_detail_lists_vehicles():
    client = make_client()
    with client:
        client.app.state.services.state.vehicles.apply_telemetry(
            "V1", {"lat": 0.0, "lon": 0.0005, "speed_kmph": 20, "heading": 90, "route_id": "R1"},
        )
        resp = client.get("/api/stops/S2", params={"dest": "S1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["route_name"] == "Main Line"
    assert body["destination"]["id"] == "S1"
    assert body["vehicles"][0]["vehicle_id"] == "V1"
    assert body["vehicles"][0]["status"] == "coming"
    assert body["vehicles"][0]["eta_to_stop_minutes"] >= 1


def test_vehicle_endpoints():
    client = make_client()
    with client:
        store = client.app.state.services.state.vehicles
        store.apply_telemetry("BUS-1", {"lat": 0.0, "lon": 0.5})
        store.apply_telemetry("BUS-2", {"lat": 0.0, "lon": 0.5, "route_id": "R7"})
        ids = client.get("/api/vehicles/ids").json()
        on_r1 = client.get("/api/vehicles", params={"route": "R1"}).json()
        one = client.get("/api/vehicles/BUS-2").json()
    assert ids == ["BUS-1", "BUS-2"]
    assert [v["vehicle_id"] for v in on_r1] == ["BUS-1"]
    assert one["route_id"] == "R7"


def test_vehicle_route_mapping():
    with make_client() as client:
        resp = client.post("/api/admin/vehicle-routes", json={"vehicle_id": "BUS-9", "routeId": "R1"})
        mapping = client.get("/api/admin/vehicle-routes").json()
    assert resp.status_code == 200
    assert mapping == {"BUS-1": "R1", "BUS-9": "R1"}


def test_simulation_controls():
    with make_client() as client:
        started = client.post("/api/simulation/start").json()
        bad = client.post("/api/simulation/speed", json={"multiplier": 20})
        faster = client.post("/api/simulation/speed", json={"multiplier": 2}).json()
        status = client.get("/api/simulation/status").json()
        stopped = client.post("/api/simulation/stop").json()

    assert started["running"] is True
    assert [v["vehicle_id"] for v in started["vehicles"]] == ["SIM-1"]
    assert bad.status_code == 422
    assert faster["interval_seconds"] == 1.0
    assert status["speed_multiplier"] == 2.0
    assert stopped["running"] is False


def test_simulated_vehicle_admin():
    with make_client() as client:
        added = client.post("/api/simulation/vehicles", json={"vehicle_id": "SIM-2", "route_id": "R1"})
        bad_route = client.post("/api/simulation/vehicles", json={"vehicle_id": "SIM-3", "route_id": "R404"})
        removed = client.delete("/api/simulation/vehicles/SIM-2")
        missing = client.delete("/api/simulation/vehicles/SIM-2")
    assert added.status_code == 200
    assert "SIM-2" in [v["vehicle_id"] for v in added.json()["vehicles"]]
    assert bad_route.status_code == 404
    assert removed.status_code == 200
    assert missing.status_code == 404


def test_default_network_loads():
    network = default_network()
    assert [r.id for r in network.routes] == ["R1", "R2", "R3", "R4", "R5"]
    assert network.vehicle_routes["BUS-002"] == "R2"
    assert len(network.simulated_vehicles) == 3


def test_websocket_snapshot_then_updates():
    client = make_client()
    with client:
        services = client.app.state.services
        services.state.vehicles.apply_telemetry("BUS-1", {"lat": 0.0, "lon": 0.2})
        with client.websocket_connect("/ws/vehicles") as ws:
            snapshot = orjson.loads(ws.receive_bytes())
            client.portal.call(
                services.ingestor.ingest, "BUS-1", {"lat": 0.0, "lon": 0.3, "speed_kmph": 25},
            )
            update = orjson.loads(ws.receive_bytes())

    assert snapshot["type"] == "snapshot"
    assert [v["vehicle_id"] for v in snapshot["vehicles"]] == ["BUS-1"]
    assert update["type"] == "telemetry"
    assert update["vehicle_id"] == "BUS-1"
    assert update["lon"] == 0.3
    assert update["resolved_route_id"] == "R1"
    assert update["next_stop"]["stop"]["id"] == "S2"
    assert update["next_stop"]["status"] == "enroute"
