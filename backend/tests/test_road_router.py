"""Tests for the OSRM client and its straight-line fallback."""

import httpx
import pytest

from transit_tracker.core.road_router import RoadRouter, straight_line_route


def make_router(handler) -> RoadRouter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://osrm.test")
    return RoadRouter(client=client)


def test_straight_line_duration_by_profile():
    walk = straight_line_route((0.0, 0.0), (0.0, 0.01), "walking")
    drive = straight_line_route((0.0, 0.0), (0.0, 0.01), "driving")
    assert walk.source == "straight_line"
    assert walk.distance_m == pytest.approx(1112, abs=1)
    assert walk.duration_s == 795  # ceil(1111.95 / 1.4)
    assert drive.duration_s < walk.duration_s
    assert walk.geometry == [(0.0, 0.0), (0.0, 0.01)]


@pytest.mark.asyncio
async def test_osrm_route_parsed():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={
            "code": "Ok",
            "routes": [{
                "distance": 1520.5,
                "duration": 301.2,
                "geometry": {"coordinates": [[72.58, 23.03], [72.59, 23.04]]},
            }],
        })

    router = make_router(handler)
    route = await router.route((23.03, 72.58), (23.04, 72.59), "driving")
    await router.close()

    assert seen["path"] == "/route/v1/driving/72.580000,23.030000;72.590000,23.040000"
    assert seen["params"] == {"overview": "full", "geometries": "geojson"}
    assert route.source == "osrm"
    assert route.distance_m == 1520.5
    assert route.duration_s == 301.2
    assert route.geometry == [(23.03, 72.58), (23.04, 72.59)]


@pytest.mark.asyncio
async def test_server_error_falls_back():
    router = make_router(lambda request: httpx.Response(503))
    route = await router.route((0.0, 0.0), (0.0, 0.01))
    await router.close()
    assert route.source == "straight_line"


@pytest.mark.asyncio
async def test_no_route_code_falls_back():
    router = make_router(lambda request: httpx.Response(200, json={"code": "NoRoute", "routes": []}))
    route = await router.route((0.0, 0.0), (0.0, 0.01), "cycling")
    await router.close()
    assert route.source == "straight_line"
    assert route.duration_s == 278  # ceil(1111.95 / 4.0)


@pytest.mark.asyncio
async def test_malformed_body_falls_back():
    router = make_router(lambda request: httpx.Response(200, content=b"<html>busy</html>"))
    route = await router.route((0.0, 0.0), (0.0, 0.01))
    await router.close()
    assert route.source == "straight_line"
