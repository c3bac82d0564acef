"""
Endpoint voli grezzi per direzione (proxy verso il provider).

GET /api/departures?date=2024-03-01&airport=BWN
GET /api/arrivals?date=2024-03-01&airport=BWN

Risposte:
    200 {"flights": [...]}   con Cache-Control condiviso 15 min + stale 1h
    400 {"error": "..."}     data mancante o non valida, codice aeroporto non valido
    500 {"error": "..."}     fetch dal provider fallito
"""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from flightboard.api.deps import ProviderDep
from flightboard.config import settings
from flightboard.errors import FetchError, ValidationError
from flightboard.models.schemas import ErrorOut, FlightsOut
from flightboard.services.providers.base import Direction, normalize_location
from flightboard.utils.dates import parse_day

logger = logging.getLogger(__name__)

router = APIRouter()

CACHE_CONTROL = "public, s-maxage=900, stale-while-revalidate=3600"


async def _flights_response(
    provider: ProviderDep,
    direction: Direction,
    date: str | None,
    airport: str | None,
) -> JSONResponse:
    #Validation area -------------------------------------------
    try:
        day = parse_day(date)
        airport = normalize_location(airport or settings.default_airport)
    except ValidationError as exc:
        return JSONResponse(ErrorOut(error=str(exc)).model_dump(), status_code=400)
    #Validation area -------------------------------------------

    try:
        flights = await provider.fetch_flights(airport, day, direction)
    except FetchError as exc:
        logger.error("Error in %s API for %s %s: %s", direction, airport, day, exc)
        return JSONResponse(
            ErrorOut(error=f"Failed to fetch {direction}").model_dump(),
            status_code=500,
        )

    body = FlightsOut(flights=flights).model_dump(mode="json")
    return JSONResponse(body, headers={"Cache-Control": CACHE_CONTROL})


@router.get("/departures", response_model=FlightsOut)
async def get_departures(
    provider: ProviderDep,
    date: str | None = None,
    airport: str | None = None,
) -> JSONResponse:
    return await _flights_response(provider, "departures", date, airport)


@router.get("/arrivals", response_model=FlightsOut)
async def get_arrivals(
    provider: ProviderDep,
    date: str | None = None,
    airport: str | None = None,
) -> JSONResponse:
    return await _flights_response(provider, "arrivals", date, airport)
