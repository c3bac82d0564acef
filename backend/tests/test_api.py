"""
Test per le route HTTP (api/v1/routes) con TestClient FastAPI.

Il lifespan non viene eseguito: provider e orchestrator sono iniettati
con app.dependency_overrides / app.state.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider, make_flight
from flightboard.api.deps import get_orchestrator, get_provider
from flightboard.errors import NetworkError, ProviderError
from flightboard.main import app
from flightboard.services.flight_data import FlightDataOrchestrator


@pytest.fixture
def provider():
    return FakeProvider({
        "departures": [make_flight("D1"), make_flight("D2")],
        "arrivals": [make_flight("A1", origin="SIN", destination="BWN")],
    })


@pytest.fixture
def client(provider, cache):
    orchestrator = FlightDataOrchestrator(cache, provider, default_airport="BWN")
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# /api/departures, /api/arrivals
# ---------------------------------------------------------------------------

class TestFlightsRoutes:

    def test_departures_ok(self, client, provider):
        resp = client.get("/api/departures", params={"date": "2024-03-01", "airport": "bwn"})

        assert resp.status_code == 200
        body = resp.json()
        assert [f["fa_flight_id"] for f in body["flights"]] == ["D1", "D2"]
        assert resp.headers["cache-control"] == "public, s-maxage=900, stale-while-revalidate=3600"
        assert provider.calls == [("BWN", date(2024, 3, 1), "departures")]

    def test_arrivals_default_airport(self, client, provider):
        resp = client.get("/api/arrivals", params={"date": "2024-03-01"})

        assert resp.status_code == 200
        assert resp.json()["flights"][0]["origin"]["code_iata"] == "SIN"
        assert provider.calls[0][0] == "BWN"

    def test_missing_date_is_400(self, client, provider):
        resp = client.get("/api/departures")

        assert resp.status_code == 400
        assert resp.json() == {"error": "Date parameter is required"}
        assert provider.calls == []

    def test_invalid_date_is_400(self, client):
        resp = client.get("/api/arrivals", params={"date": "03/01/2024"})
        assert resp.status_code == 400
        assert "error" in resp.json()

    @pytest.mark.parametrize("airport", ["../../operators/XYZ?", "BW", "BWN/flights"])
    def test_invalid_airport_is_400(self, client, provider, airport):
        resp = client.get("/api/departures", params={"date": "2024-03-01", "airport": airport})

        assert resp.status_code == 400
        assert "Invalid location code" in resp.json()["error"]
        assert provider.calls == []

    @pytest.mark.parametrize("exc", [NetworkError("timed out"), ProviderError(502, "bad gateway")])
    def test_fetch_failure_is_500(self, client, provider, exc):
        provider.responses["departures"] = exc

        resp = client.get("/api/departures", params={"date": "2024-03-01"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch departures"}
        assert "cache-control" not in resp.headers


# ---------------------------------------------------------------------------
# /api/v1/board
# ---------------------------------------------------------------------------

class TestBoardRoutes:

    def test_board_state(self, client):
        resp = client.get("/api/v1/board", params={"date": "2024-03-01"})

        assert resp.status_code == 200
        body = resp.json()
        assert len(body["departures"]) == 2
        assert len(body["arrivals"]) == 1
        assert body["loading"] is False
        assert body["error"] is None
        assert body["cache_status"] == {"departures": "fresh", "arrivals": "fresh"}

    def test_board_second_call_served_from_cache(self, client, provider):
        client.get("/api/v1/board", params={"date": "2024-03-01"})
        provider.calls.clear()

        resp = client.get("/api/v1/board", params={"date": "2024-03-01"})

        assert resp.status_code == 200
        assert provider.calls == []

    def test_board_reports_partial_failure(self, client, provider):
        provider.responses["arrivals"] = NetworkError("Request timed out after 15s")

        body = client.get("/api/v1/board", params={"date": "2024-03-01"}).json()

        assert len(body["departures"]) == 2
        assert body["arrivals"] == []
        assert "timed out" in body["error"]

    def test_board_missing_date_is_400(self, client):
        assert client.get("/api/v1/board").status_code == 400

    def test_board_invalid_airport_is_400(self, client, provider):
        resp = client.get("/api/v1/board", params={"date": "2024-03-01", "airport": "../../operators/XYZ?"})

        assert resp.status_code == 400
        assert provider.calls == []

    def test_cache_stats_and_clear(self, client):
        client.get("/api/v1/board", params={"date": "2024-03-01"})

        stats = client.get("/api/v1/board/cache/stats").json()
        assert stats == {"total": 2, "fresh": 2, "stale": 0, "expired": 0}

        cleared = client.delete("/api/v1/board/cache").json()
        assert cleared == {"cleared": 2}
        assert client.get("/api/v1/board/cache/stats").json()["total"] == 0


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
