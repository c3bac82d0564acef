"""
Flight Data Orchestrator - coordinatore a livello di richiesta.

Dato (giorno, aeroporto), per ogni direzione decide se:
  - servire subito la cache fresca              (nessuna chiamata di rete)
  - mostrare la cache stale e aggiornarla       (stale-while-revalidate)
  - bloccarsi su un fetch nuovo                 (cache assente o scaduta)

Flusso di fetch_flights():
  1. Lettura + classificazione cache per departures e arrivals
  2. Entrambe fresh → stato dalla cache, zero I/O
  3. Almeno una stale → lo stato intermedio con i dati stale viene pubblicato
     ai listener PRIMA di partire col refresh
  4. Fetch concorrente (asyncio.gather) delle direzioni non fresh
  5. Successo → scrittura in cache, cache_status=fresh per quella direzione
  6. Errore → la direzione tiene i dati in cache (anche scaduti) o lista vuota;
     l'errore non tocca l'altra direzione
  7. Stato finale con loading=False; error valorizzato solo se un fetch
     di questa chiamata è fallito. Nessun errore di rete esce da qui.

Le chiamate sovrapposte non sono serializzate: vince l'ultimo fetch che
completa. Con discard_superseded=True ogni chiamata riceve un numero di
sequenza e gli aggiornamenti di chiamate superate non toccano lo stato
(la cache viene comunque scritta).
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from flightboard.config import settings
from flightboard.errors import FetchError
from flightboard.models.schemas import CacheStatus, FlightBoardState
from flightboard.services.cache import CacheEntry, FlightCache, Freshness
from flightboard.services.providers.base import (
    DIRECTIONS,
    Direction,
    FlightDataProvider,
    FlightRecord,
    normalize_location,
)
from flightboard.utils.dates import parse_day

logger = logging.getLogger(__name__)

StateListener = Callable[[FlightBoardState], None]


@dataclass
class _DirectionResult:
    direction: Direction
    flights: list[FlightRecord] | None = None
    error: str | None = None


class FlightDataOrchestrator:

    def __init__(
        self,
        cache: FlightCache,
        provider: FlightDataProvider,
        default_airport: str | None = None,
        discard_superseded: bool | None = None,
        sweep_on_first_call: bool = True,
    ) -> None:
        self.cache = cache
        self.provider = provider
        self.default_airport = default_airport or settings.default_airport
        self.discard_superseded = (
            settings.discard_superseded_results if discard_superseded is None else discard_superseded
        )
        self._state = FlightBoardState()
        self._listeners: list[StateListener] = []
        self._sequence = 0
        # sweep_on_first_call=False: sweep già fatto all'avvio dell'app
        self._swept = not sweep_on_first_call

    @property
    def state(self) -> FlightBoardState:
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Registra un listener per ogni transizione di stato. Restituisce l'unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, state: FlightBoardState, sequence: int | None = None) -> None:
        if self.discard_superseded and sequence is not None and sequence != self._sequence:
            logger.debug("Stato della chiamata #%d scartato (superata da #%d)", sequence, self._sequence)
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state.model_copy(deep=True))
            except Exception:
                logger.exception("Listener di stato fallito")

    ########################################################################
    #       HELPERS
    ########################################################################
    async def _sweep_once(self) -> None:
        """Eviction delle entry scadute, una volta per sessione."""
        if self._swept:
            return
        self._swept = True
        try:
            await self.cache.evict_expired()
        except Exception as exc:
            logger.warning("Eviction cache fallita: %s: %s", type(exc).__name__, exc)

    async def _read(self, key: str) -> CacheEntry | None:
        try:
            return await self.cache.read(key)
        except Exception as exc:
            logger.warning("Lettura cache %s fallita: %s: %s", key, type(exc).__name__, exc)
            return None

    async def _fetch_direction(
        self,
        location: str,
        day: date,
        direction: Direction,
        key: str,
    ) -> _DirectionResult:
        try:
            flights = await self.provider.fetch_flights(location, day, direction)
        except FetchError as exc:
            logger.warning("Fetch %s %s %s fallito: %s", location, direction, day, exc)
            return _DirectionResult(direction, error=str(exc) or type(exc).__name__)
        except Exception as exc:
            logger.warning(
                "Fetch %s %s %s fallito: %s: %s",
                location, direction, day, type(exc).__name__, exc,
            )
            return _DirectionResult(direction, error=f"{type(exc).__name__}: {exc}")

        try:
            await self.cache.write(key, flights)
        except Exception as exc:
            # Il dato è comunque valido per questa chiamata
            logger.warning("Scrittura cache %s fallita: %s: %s", key, type(exc).__name__, exc)
        return _DirectionResult(direction, flights=flights)

    ########################################################################
    #       ENTRY POINT PUBBLICO
    ########################################################################
    async def fetch_flights(
        self,
        day: date | str,
        location: str | None = None,
    ) -> FlightBoardState:
        """
        Stato consolidato della board per (giorno, aeroporto).

        Raises:
            ValidationError: giorno o codice aeroporto non validi
        """
        day = parse_day(day)
        location = normalize_location(location or self.default_airport)
        keys = {d: self.cache.key(location, day, d) for d in DIRECTIONS}

        self._sequence += 1
        sequence = self._sequence

        await self._sweep_once()
        self._publish(self._state.model_copy(update={"loading": True, "error": None}), sequence)

        # --- 1. Cache + classificazione per direzione
        entries = {d: await self._read(keys[d]) for d in DIRECTIONS}
        status = {d: self.cache.classify(entries[d]) for d in DIRECTIONS}

        # --- 2. Fast path: tutto fresco, nessuna chiamata
        if all(s is Freshness.FRESH for s in status.values()):
            state = FlightBoardState(
                departures=entries["departures"].data,
                arrivals=entries["arrivals"].data,
                loading=False,
                error=None,
                cache_status=CacheStatus(**status),
            )
            self._publish(state, sequence)
            return state

        # --- 3. Dati stale visibili subito, prima del refresh
        usable = {
            d: entries[d].data if status[d] is not Freshness.NONE else []
            for d in DIRECTIONS
        }
        if any(s is Freshness.STALE for s in status.values()):
            self._publish(
                FlightBoardState(
                    departures=usable["departures"],
                    arrivals=usable["arrivals"],
                    loading=True,
                    error=None,
                    cache_status=CacheStatus(**status),
                ),
                sequence,
            )

        # --- 4. Fetch concorrente delle direzioni non fresche
        pending = [d for d in DIRECTIONS if status[d] is not Freshness.FRESH]
        results: list[_DirectionResult] = await asyncio.gather(
            *[self._fetch_direction(location, day, d, keys[d]) for d in pending]
        )

        # --- 5/6. Merge: successi in cache e fresh, errori tengono la cache (anche scaduta)
        flights = {d: entries[d].data if entries[d] is not None else [] for d in DIRECTIONS}
        final_status = dict(status)
        errors: list[str] = []
        for res in results:
            if res.error is None:
                flights[res.direction] = res.flights
                final_status[res.direction] = Freshness.FRESH
            else:
                errors.append(f"Failed to fetch {res.direction}: {res.error}")

        # --- 7. Stato finale
        state = FlightBoardState(
            departures=flights["departures"],
            arrivals=flights["arrivals"],
            loading=False,
            error="; ".join(errors) if errors else None,
            cache_status=CacheStatus(**final_status),
        )
        self._publish(state, sequence)
        return state

    async def clear_cache(self) -> int:
        """Svuota il namespace della cache e azzera il cache_status."""
        removed = await self.cache.clear_all()
        self._publish(self._state.model_copy(update={"cache_status": CacheStatus()}))
        return removed
