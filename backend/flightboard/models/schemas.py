from pydantic import BaseModel, Field

from flightboard.services.cache import CacheStats, Freshness
from flightboard.services.providers.base import FlightRecord


# ---------------------------------------------------------------------------
# Stato della board (prodotto dall'orchestrator, read-only per i consumer)
# ---------------------------------------------------------------------------

class CacheStatus(BaseModel):
    departures: Freshness = Freshness.NONE
    arrivals: Freshness = Freshness.NONE


class FlightBoardState(BaseModel):
    departures: list[FlightRecord] = Field(default_factory=list)
    arrivals: list[FlightRecord] = Field(default_factory=list)
    loading: bool = False
    error: str | None = None
    cache_status: CacheStatus = Field(default_factory=CacheStatus)


# ---------------------------------------------------------------------------
# Risposte delle route /departures e /arrivals
# ---------------------------------------------------------------------------

class FlightsOut(BaseModel):
    flights: list[FlightRecord]


class ErrorOut(BaseModel):
    error: str


# ---------------------------------------------------------------------------
# Gestione cache
# ---------------------------------------------------------------------------

class CacheClearedOut(BaseModel):
    cleared: int


CacheStatsOut = CacheStats
