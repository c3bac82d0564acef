"""
AeroApiProvider - FlightAware AeroAPI (provider unico della board).

Endpoint primario:
    GET /airports/{code}/flights/{departures|arrivals}?start=<ISO>&end=<ISO>&max_pages=1
Autenticazione: header statico `x-apikey`.

Il giorno richiesto è un giorno di calendario LOCALE dell'aeroporto:
viene convertito in range UTC [start, end) prima della query.

Ogni chiamata ha un timeout esplicito (il provider a volte resta appeso):
15s sul primario, 10s sui fallback. Un timeout diventa NetworkError.

Se il primario risponde con lista vuota si prova una catena di fallback,
ognuno al massimo una volta:
  1. forma alternativa del codice aeroporto (IATA <-> ICAO, es. BWN → WBSB)
  2. endpoint generico /airports/{code}/flights
Un fallback fallito viene loggato e saltato; resta il risultato vuoto.

Documentazione: https://www.flightaware.com/aeroapi/portal/documentation
"""
import logging
from datetime import date

import httpx
from pydantic import ValidationError as PydanticValidationError

from flightboard.errors import FetchError, NetworkError, ProviderError
from flightboard.services.providers.base import Direction, FlightDataProvider, FlightRecord, normalize_location
from flightboard.utils.dates import local_day_bounds, to_iso_z

logger = logging.getLogger(__name__)


def _has_airport(value) -> bool:
    return isinstance(value, dict)


def _parse_flights(items: list, location: str, direction: str) -> list[FlightRecord]:
    """
    Normalizza la lista grezza del provider in FlightRecord.

    Scarta (senza eccezioni):
      - record senza fa_flight_id o con campi di tipo errato
      - record senza origin/destination: la presentazione non può renderli
    """
    records: list[FlightRecord] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if not (_has_airport(item.get("origin")) and _has_airport(item.get("destination"))):
            logger.debug(
                "AeroAPI %s %s: scarto %s, origin/destination mancanti",
                location, direction, item.get("ident"),
            )
            continue
        try:
            records.append(FlightRecord.model_validate(item))
        except PydanticValidationError as exc:
            logger.debug(
                "AeroAPI %s %s: record non valido %s: %s",
                location, direction, item.get("ident"), exc.error_count(),
            )
    return records


class AeroApiProvider(FlightDataProvider):

    def __init__(
        self,
        api_key: str,
        base_url: str,
        tz_name: str,
        aliases: dict[str, str] | None = None,
        timeout: float = 15.0,
        fallback_timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.tz_name = tz_name
        self.timeout = timeout
        self.fallback_timeout = fallback_timeout
        # Alias bidirezionali: BWN → WBSB e WBSB → BWN
        self.aliases: dict[str, str] = {}
        for code, alt in (aliases or {}).items():
            self.aliases[code.upper()] = alt.upper()
            self.aliases[alt.upper()] = code.upper()
        self._transport = transport

    async def _get(self, path: str, params: dict, timeout: float, keys: tuple[str, ...]) -> list:
        """
        GET autenticato con timeout; restituisce la lista sotto la prima
        chiave valorizzata tra `keys`. Errori httpx e risposte malformate
        diventano NetworkError / ProviderError.
        """
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params, headers={"x-apikey": self.api_key})
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {path} timed out after {timeout:g}s") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Request to {path} failed: {type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            logger.warning("AeroAPI %s: HTTP %d - %s", path, resp.status_code, resp.text[:300])
            raise ProviderError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(resp.status_code, f"invalid JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise ProviderError(resp.status_code, "unexpected response shape")

        items = next((data[k] for k in keys if data.get(k)), [])
        if not isinstance(items, list):
            raise ProviderError(resp.status_code, "unexpected response shape")
        return items

    async def fetch_flights(
        self,
        location: str,
        day: date,
        direction: Direction,
    ) -> list[FlightRecord]:
        location = normalize_location(location)
        start, end = local_day_bounds(day, self.tz_name)
        params = {"start": to_iso_z(start), "end": to_iso_z(end), "max_pages": 1}

        items = await self._get(
            f"/airports/{location}/flights/{direction}", params, self.timeout, ("flights", direction),
        )
        flights = _parse_flights(items, location, direction)
        logger.debug("AeroAPI %s %s %s: %d flights", location, direction, day, len(flights))
        if flights:
            return flights

        # --- Fallback (solo su risultato vuoto, ognuno una volta sola)
        alt_code = self.aliases.get(location)
        if alt_code:
            flights = await self._fallback(
                f"/airports/{alt_code}/flights/{direction}", params, direction, location,
            )
            if flights:
                return flights

        flights = await self._fallback(f"/airports/{location}/flights", params, direction, location)
        return flights

    async def _fallback(
        self,
        path: str,
        params: dict,
        direction: Direction,
        location: str,
    ) -> list[FlightRecord]:
        try:
            items = await self._get(path, params, self.fallback_timeout, (direction, "flights"))
        except FetchError as exc:
            logger.warning("AeroAPI fallback %s fallito: %s", path, exc)
            return []
        flights = _parse_flights(items, location, direction)
        if flights:
            logger.info("AeroAPI fallback %s: %d flights", path, len(flights))
        return flights
