"""
Flight Provider Factory.

build_provider() costruisce il provider configurato nel .env.
Oggi esiste solo AeroAPI; la factory resta il punto unico in cui
route e orchestrator ottengono il FlightDataProvider.
"""
import httpx

from flightboard.config import settings
from flightboard.services.providers.aeroapi import AeroApiProvider
from flightboard.services.providers.base import FlightDataProvider


def build_provider(transport: httpx.AsyncBaseTransport | None = None) -> FlightDataProvider:
    return AeroApiProvider(
        api_key=settings.aeroapi_api_key,
        base_url=settings.aeroapi_base_url,
        tz_name=settings.airport_timezone,
        aliases=settings.airport_aliases,
        timeout=settings.request_timeout_seconds,
        fallback_timeout=settings.fallback_timeout_seconds,
        transport=transport,
    )
