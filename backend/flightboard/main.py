from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flightboard.config import settings
from flightboard.db.redis import close_redis
from flightboard.db.store import build_store
from flightboard.api.v1.router import api_router, flights_api_router
from flightboard.services.cache import FlightCache
from flightboard.services.flight_data import FlightDataOrchestrator
from flightboard.services.providers.factory import build_provider


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    store = await build_store()
    cache = FlightCache(store)
    await cache.evict_expired()  # sweep una volta per avvio

    app.state.provider = build_provider()
    app.state.orchestrator = FlightDataOrchestrator(
        cache, app.state.provider, sweep_on_first_call=False,
    )

    yield

    # Shutdown
    await close_redis()


app = FastAPI(
    title="FlightBoard API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(flights_api_router)
app.include_router(api_router)


@app.get("/api/v1/health")
async def health():
    return {"status": "ok", "env": settings.app_env}
