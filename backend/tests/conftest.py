"""
Fixture condivise per la test suite FlightBoard.

Nessun servizio reale è necessario: lo store è MemoryKeyValueStore,
il tempo è un clock fittizio avanzabile, il provider è un fake in memoria
(o httpx.MockTransport nei test di AeroApiProvider).
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from flightboard.db.store import MemoryKeyValueStore
from flightboard.errors import NetworkError
from flightboard.services.cache import FlightCache
from flightboard.services.providers.base import FlightDataProvider, FlightRecord


# ---------------------------------------------------------------------------
# Clock fittizio
# ---------------------------------------------------------------------------

class FakeClock:
    """Callable che restituisce un istante UTC fisso, avanzabile a mano."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Store + cache
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def cache(store, clock):
    return FlightCache(
        store,
        prefix="flightdata_",
        fresh_window=timedelta(minutes=15),
        stale_window=timedelta(hours=1),
        clock=clock,
    )


# ---------------------------------------------------------------------------
# FlightRecord fittizi
# ---------------------------------------------------------------------------

def make_flight_dict(flight_id: str, ident: str = "BI601", origin: str = "BWN", destination: str = "SIN") -> dict:
    """Record grezzo nel formato AeroAPI (sottoinsieme dei campi)."""
    return {
        "fa_flight_id": flight_id,
        "ident": ident,
        "ident_iata": ident,
        "operator_iata": ident[:2],
        "origin": {"code": f"W{origin}", "code_iata": origin, "name": f"{origin} Intl", "city": origin},
        "destination": {"code": f"W{destination}", "code_iata": destination, "city": destination},
        "scheduled_out": "2024-03-01T01:00:00Z",
        "status": "Scheduled",
    }


def make_flight(flight_id: str, **kwargs) -> FlightRecord:
    return FlightRecord.model_validate(make_flight_dict(flight_id, **kwargs))


@pytest.fixture
def two_departures():
    return [
        make_flight("BI601-1709251200-schedule-0001", ident="BI601"),
        make_flight("BI603-1709262000-schedule-0002", ident="BI603", destination="KUL"),
    ]


# ---------------------------------------------------------------------------
# Provider fittizio
# ---------------------------------------------------------------------------

class FakeProvider(FlightDataProvider):
    """
    Provider in memoria: `responses[direction]` è una lista di voli
    oppure un'eccezione da sollevare. Registra ogni chiamata in `calls`.
    """

    def __init__(self, responses: dict | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, date, str]] = []

    async def fetch_flights(self, location, day, direction):
        self.calls.append((location, day, direction))
        result = self.responses.get(direction, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def timeout_error():
    return NetworkError("Request to /airports/BWN/flights/arrivals timed out after 15s")
