#To aggregate all routes


from fastapi import APIRouter

from flightboard.api.v1.routes.board import router as board_router
from flightboard.api.v1.routes.flights import router as flights_router

# /api/departures e /api/arrivals: contratto storico consumato dal frontend
flights_api_router = APIRouter(prefix="/api", tags=["flights"])
flights_api_router.include_router(flights_router)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(board_router, prefix="/board", tags=["board"])
