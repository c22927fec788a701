from typing import Sequence

import pytest
from fastapi.testclient import TestClient

from supply_routes.main import create_app
from supply_routes.services.distance.base import DistanceResult
from supply_routes.services.distance.predefined import PredefinedDistanceProvider

SCENARIO = [
    {"place": "Bangalore", "demand": 2000},
    {"place": "Mysuru", "demand": 1500},
    {"place": "Hassan", "demand": 800},
    {"place": "Chikkamagaluru", "demand": 700},
]


class DummyProvider:
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []

    async def resolve(self, origin: str, destination_names: Sequence[str]) -> list[DistanceResult]:
        self.calls.append((origin, list(destination_names)))
        return [DistanceResult(place=name, distance_km=10.0 * (i + 1), duration_text="") for i, name in enumerate(destination_names)]


@pytest.fixture(autouse=True)
def clear_planner_cache():
    from supply_routes.services.planner.service import get_planner

    get_planner.cache_clear()
    yield
    get_planner.cache_clear()


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from supply_routes.api.routes import allocation as allocation_routes
    from supply_routes.services.planner import service as planner_service

    monkeypatch.setattr(allocation_routes, "get_distance_provider", lambda: PredefinedDistanceProvider())
    monkeypatch.setattr(planner_service, "get_distance_provider", lambda: PredefinedDistanceProvider())
    return TestClient(create_app())


def test_root_and_health(api_client: TestClient):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}


def test_distance_health_reports_predefined_provider(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from supply_routes.config import settings

    monkeypatch.setattr(settings, "distance_provider", "predefined")

    payload = api_client.get("/api/health/distance").json()

    assert payload == {"service": "distance", "provider": "predefined", "healthy": True}


def test_compute_resolves_distances_and_allocates(api_client: TestClient):
    response = api_client.post(
        "/api/allocation/compute",
        json={"source": "Mandya", "total_supply": 5000, "destinations": SCENARIO},
    )

    assert response.status_code == 200
    payload = response.json()
    assert [item["place"] for item in payload["destinations"]] == ["Mysuru", "Hassan", "Bangalore", "Chikkamagaluru"]
    assert [item["allocated_supply"] for item in payload["destinations"]] == [1500, 800, 2000, 700]
    assert payload["remaining_supply"] == 0
    assert payload["total_round_trip_distance_km"] == 826
    assert payload["metrics"]["supply_coverage_percent"] == pytest.approx(100.0)
    assert payload["recommendations"][3]["priority"] == "Low Priority"


def test_compute_only_resolves_missing_distances(monkeypatch: pytest.MonkeyPatch):
    from supply_routes.api.routes import allocation as allocation_routes

    provider = DummyProvider()
    monkeypatch.setattr(allocation_routes, "get_distance_provider", lambda: provider)
    client = TestClient(create_app())

    response = client.post(
        "/api/allocation/compute",
        json={
            "source": "Farm",
            "total_supply": 100,
            "destinations": [
                {"place": "Known", "demand": 50, "distance_km": 5},
                {"place": "Unknown", "demand": 80},
            ],
        },
    )

    assert response.status_code == 200
    assert provider.calls == [("Farm", ["Unknown"])]
    destinations = response.json()["destinations"]
    assert [(item["place"], item["allocated_supply"]) for item in destinations] == [("Known", 50), ("Unknown", 50)]


def test_compute_rejects_duplicate_places(api_client: TestClient):
    response = api_client.post(
        "/api/allocation/compute",
        json={
            "source": "Mandya",
            "total_supply": 100,
            "destinations": [{"place": "Mysuru", "demand": 10}, {"place": "Mysuru", "demand": 20}],
        },
    )

    assert response.status_code == 400
    assert "Duplicate" in response.json()["detail"]


def test_compute_rejects_non_positive_demand(api_client: TestClient):
    response = api_client.post(
        "/api/allocation/compute",
        json={"source": "Mandya", "total_supply": 100, "destinations": [{"place": "Mysuru", "demand": 0}]},
    )

    assert response.status_code == 422


def test_compute_reports_distance_failures(api_client: TestClient):
    response = api_client.post(
        "/api/allocation/compute",
        json={"source": "Mandya", "total_supply": 100, "destinations": [{"place": "Atlantis", "demand": 10}]},
    )

    assert response.status_code == 502
    assert "Atlantis" in response.json()["detail"]


def test_export_returns_csv(api_client: TestClient):
    response = api_client.post(
        "/api/allocation/export",
        json={"source": "Mandya", "total_supply": 1000, "destinations": SCENARIO},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("sequence,place,demand")
    assert lines[1].startswith("1,Mysuru,1500")
    assert len(lines) == 5


def test_planner_flow(api_client: TestClient):
    state = api_client.get("/api/planner").json()
    assert state["source"] == "Mandya"
    assert state["destinations"] == []

    api_client.put("/api/planner/supply", json={"total_supply": 1000})
    for item in SCENARIO:
        response = api_client.post("/api/planner/destinations", json=item)
        assert response.status_code == 200

    state = response.json()
    assert state["stale"] is False
    assert state["pending"] == []
    plan = state["plan"]
    assert plan["destinations"][0]["place"] == "Mysuru"
    assert plan["destinations"][0]["allocated_supply"] == 1000
    assert plan["destinations"][0]["unmet_demand"] == 500
    assert plan["metrics"]["supply_coverage_percent"] == pytest.approx(20.0)

    state = api_client.delete("/api/planner/destinations/Mysuru").json()
    assert [item["place"] for item in state["plan"]["destinations"]] == ["Hassan", "Bangalore", "Chikkamagaluru"]
    assert state["plan"]["destinations"][0]["allocated_supply"] == 800


def test_planner_errors(api_client: TestClient):
    assert api_client.delete("/api/planner/destinations/Nowhere").status_code == 404
    assert api_client.post("/api/planner/destinations", json={"place": "Atlantis", "demand": 5}).status_code == 502

    api_client.post("/api/planner/destinations", json={"place": "Mysuru", "demand": 5})
    duplicate = api_client.post("/api/planner/destinations", json={"place": "Mysuru", "demand": 7})
    assert duplicate.status_code == 400

    failed = api_client.put("/api/planner/source", json={"source": "Hubli"})
    assert failed.status_code == 502
    state = api_client.get("/api/planner").json()
    assert state["source"] == "Mandya"
    assert state["stale"] is False
    assert state["plan"]["source"] == "Mandya"

    updated = api_client.put("/api/planner/supply", json={"total_supply": 3})
    assert updated.status_code == 200
    assert updated.json()["plan"]["destinations"][0]["allocated_supply"] == 3


def test_compute_reports_places_the_provider_left_out(monkeypatch: pytest.MonkeyPatch):
    from supply_routes.api.routes import allocation as allocation_routes

    class PartialProvider:
        async def resolve(self, origin: str, destination_names: Sequence[str]) -> list[DistanceResult]:
            return [DistanceResult(place=destination_names[0], distance_km=12.0, duration_text="")]

    monkeypatch.setattr(allocation_routes, "get_distance_provider", lambda: PartialProvider())
    client = TestClient(create_app())

    response = client.post(
        "/api/allocation/compute",
        json={
            "source": "Farm",
            "total_supply": 100,
            "destinations": [{"place": "Near", "demand": 50}, {"place": "Lost", "demand": 80}],
        },
    )

    assert response.status_code == 502
    assert "Lost" in response.json()["detail"]
