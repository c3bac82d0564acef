"""
Flight Provider Layer - interfaccia astratta (Strategy Pattern).

L'orchestrator e le route usano solo queste classi.
Il provider concreto viene costruito dalla factory (providers/factory.py).

FlightRecord è un payload opaco per la cache: l'unico campo obbligatorio è
fa_flight_id, tutto il resto può mancare. I campi sconosciuti restituiti
dal provider vengono conservati così come sono (extra="allow").
"""
import re
from abc import ABC, abstractmethod
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict

from flightboard.errors import ValidationError

Direction = Literal["departures", "arrivals"]
DIRECTIONS: tuple[Direction, ...] = ("departures", "arrivals")

# IATA (3) o ICAO (4): finisce sia nel path del provider sia nella chiave di cache
_LOCATION_RE = re.compile(r"[A-Za-z0-9]{3,4}")


def normalize_location(location: str | None) -> str:
    """Codice aeroporto in maiuscolo; ValidationError se non è un codice IATA/ICAO."""
    if not isinstance(location, str) or not _LOCATION_RE.fullmatch(location):
        raise ValidationError(f"Invalid location code {location!r}")
    return location.upper()


class AirportRef(BaseModel):
    """Aeroporto di origine/destinazione come lo descrive il provider."""
    model_config = ConfigDict(extra="allow")

    code: str | None = None
    code_iata: str | None = None
    code_icao: str | None = None
    code_lid: str | None = None
    timezone: str | None = None
    name: str | None = None
    city: str | None = None
    airport_info_url: str | None = None


class FlightRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    fa_flight_id: str

    # Identificativi volo e operatore
    ident: str | None = None
    ident_iata: str | None = None
    ident_icao: str | None = None
    flight_number: str | None = None
    operator: str | None = None
    operator_iata: str | None = None
    operator_icao: str | None = None
    registration: str | None = None

    origin: AirportRef | None = None
    destination: AirportRef | None = None

    # Orari per fase: out (gate), off (decollo), on (atterraggio), in (gate)
    scheduled_out: str | None = None
    estimated_out: str | None = None
    actual_out: str | None = None
    scheduled_off: str | None = None
    estimated_off: str | None = None
    actual_off: str | None = None
    scheduled_on: str | None = None
    estimated_on: str | None = None
    actual_on: str | None = None
    scheduled_in: str | None = None
    estimated_in: str | None = None
    actual_in: str | None = None

    status: str | None = None
    aircraft_type: str | None = None
    route_distance: int | None = None
    progress_percent: int | None = None
    departure_delay: int | None = None   # secondi
    arrival_delay: int | None = None     # secondi

    gate_origin: str | None = None
    gate_destination: str | None = None
    terminal_origin: str | None = None
    terminal_destination: str | None = None
    baggage_claim: str | None = None


class FlightDataProvider(ABC):

    @abstractmethod
    async def fetch_flights(
        self,
        location: str,
        day: date,
        direction: Direction,
    ) -> list[FlightRecord]:
        """
        Voli di `location` nel giorno `day` (giorno di calendario LOCALE
        dell'aeroporto, non già convertito in UTC).

        Raises:
            NetworkError:  timeout o errore di trasporto
            ProviderError: risposta HTTP non-2xx
        """
        ...
