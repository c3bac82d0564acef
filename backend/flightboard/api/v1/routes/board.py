"""
Endpoint Board (stato consolidato dell'orchestrator).

GET    /api/v1/board?date=2024-03-01&airport=BWN   → FlightBoardState
DELETE /api/v1/board/cache                         → {"cleared": n}
GET    /api/v1/board/cache/stats                   → conteggi fresh/stale/expired
"""
from fastapi import APIRouter, HTTPException

from flightboard.api.deps import OrchestratorDep
from flightboard.errors import ValidationError
from flightboard.models.schemas import CacheClearedOut, CacheStatsOut, FlightBoardState

router = APIRouter()


@router.get("", response_model=FlightBoardState)
async def get_board(
    orchestrator: OrchestratorDep,
    date: str | None = None,
    airport: str | None = None,
) -> FlightBoardState:
    try:
        return await orchestrator.fetch_flights(date, airport)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/cache", response_model=CacheClearedOut)
async def clear_board_cache(orchestrator: OrchestratorDep) -> CacheClearedOut:
    return CacheClearedOut(cleared=await orchestrator.clear_cache())


@router.get("/cache/stats", response_model=CacheStatsOut)
async def board_cache_stats(orchestrator: OrchestratorDep) -> CacheStatsOut:
    return await orchestrator.cache.stats()
