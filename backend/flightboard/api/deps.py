"""
Dependency FastAPI condivise dalle route.

Il provider e l'orchestrator sono singleton di processo creati nel lifespan
(main.py) e salvati in app.state; nei test vengono sostituiti con
app.dependency_overrides.
"""
from typing import Annotated

from fastapi import Depends, Request

from flightboard.services.flight_data import FlightDataOrchestrator
from flightboard.services.providers.base import FlightDataProvider
from flightboard.services.providers.factory import build_provider


def get_provider(request: Request) -> FlightDataProvider:
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        provider = build_provider()
        request.app.state.provider = provider
    return provider


def get_orchestrator(request: Request) -> FlightDataOrchestrator:
    return request.app.state.orchestrator


ProviderDep = Annotated[FlightDataProvider, Depends(get_provider)]
OrchestratorDep = Annotated[FlightDataOrchestrator, Depends(get_orchestrator)]
