"""
Cache layer per i voli (KeyValueStore, stale-while-revalidate).

Flusso di utilizzo:
    1. key()      → chiave "<prefix><airport>_<YYYY-MM-DD>_<direction>"
    2. read()     → entry salvata o None (entry corrotta = miss, mai un errore)
    3. classify() → fresh / stale / none
    4. write()    → dopo ogni fetch riuscito, sovrascrive l'entry

Due livelli di freschezza:
    fresh  se now <  expires_at                      (15 min)
    stale  se expires_at <= now < created_at + 1h    (servibile mentre si aggiorna)
    none   altrimenti (assente o scaduta)

Le entry non vengono mai cancellate attivamente: evict_expired() è chiamato
una volta per sessione (startup / primo fetch) e rimuove quelle oltre l'ora.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from flightboard.config import settings
from flightboard.db.store import KeyValueStore
from flightboard.errors import CacheCorruptionError, ValidationError
from flightboard.services.providers.base import DIRECTIONS, FlightRecord, normalize_location
from flightboard.utils.dates import parse_day

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Freshness(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    NONE = "none"


class CacheEntry(BaseModel, Generic[T]):
    """Entry immutabile: un refresh crea una nuova entry sotto la stessa chiave."""
    model_config = ConfigDict(frozen=True)

    data: T
    created_at: datetime
    expires_at: datetime


class CacheStats(BaseModel):
    total: int = 0
    fresh: int = 0
    stale: int = 0
    expired: int = 0


class FlightCache:

    def __init__(
        self,
        store: KeyValueStore,
        prefix: str | None = None,
        fresh_window: timedelta | None = None,
        stale_window: timedelta | None = None,
        clock: Clock = _utcnow,
        payload: type = list[FlightRecord],
    ) -> None:
        self.store = store
        self.prefix = prefix if prefix is not None else settings.cache_prefix
        self.fresh_window = fresh_window or timedelta(minutes=settings.cache_fresh_minutes)
        self.stale_window = stale_window or timedelta(minutes=settings.cache_stale_minutes)
        self.clock = clock
        self._entry_model = CacheEntry[payload]

    ########################################################################
    #       KEY
    ########################################################################
    def key(self, location: str, day: date | str, direction: str) -> str:
        """
        Chiave deterministica per (aeroporto, giorno, direzione).

        '_' fa da separatore: il codice aeroporto è solo alfanumerico,
        quindi triple diverse non collidono mai.
        """
        location = normalize_location(location)
        if direction not in DIRECTIONS:
            raise ValidationError(f"Invalid direction {direction!r}")
        day_iso = parse_day(day).isoformat()
        return f"{self.prefix}{location}_{day_iso}_{direction}"

    ########################################################################
    #       READ / WRITE
    ########################################################################
    def _decode(self, key: str, raw: str) -> CacheEntry:
        try:
            return self._entry_model.model_validate_json(raw)
        except PydanticValidationError as exc:
            raise CacheCorruptionError(key, f"{exc.error_count()} validation errors") from exc

    async def read(self, key: str) -> CacheEntry | None:
        """Entry salvata o None. Un valore corrotto è trattato come assente."""
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return self._decode(key, raw)
        except CacheCorruptionError as exc:
            logger.warning("%s - trattata come cache miss", exc)
            return None

    async def write(self, key: str, data) -> CacheEntry:
        """Salva sempre una entry nuova (expires_at = now + 15min), sovrascrivendo."""
        now = self.clock()
        entry = self._entry_model(data=data, created_at=now, expires_at=now + self.fresh_window)
        await self.store.set(key, entry.model_dump_json())
        logger.debug("Cached %s (%s)", key, _size(data))
        return entry

    ########################################################################
    #       FRESHNESS
    ########################################################################
    def classify(self, entry: CacheEntry | None) -> Freshness:
        if entry is None:
            return Freshness.NONE
        now = self.clock()
        if now < entry.expires_at:
            return Freshness.FRESH
        if now < entry.created_at + self.stale_window:
            return Freshness.STALE
        return Freshness.NONE

    def _is_expired(self, entry: CacheEntry, now: datetime) -> bool:
        return now >= entry.created_at + self.stale_window

    ########################################################################
    #       EVICTION
    ########################################################################
    async def evict_expired(self) -> int:
        """
        Rimuove le entry del namespace oltre la finestra stale (1h).
        Anche le entry corrotte vengono rimosse: non sarebbero mai servibili.
        Idempotente: una seconda chiamata non rimuove nulla.
        """
        now = self.clock()
        removed = 0
        for key in await self.store.keys(self.prefix):
            raw = await self.store.get(key)
            if raw is None:
                continue
            try:
                expired = self._is_expired(self._decode(key, raw), now)
            except CacheCorruptionError:
                expired = True
            if expired and await self.store.delete(key):
                removed += 1

        if removed:
            logger.info("Cleaned %d expired cache entries", removed)
        return removed

    async def clear_all(self) -> int:
        """Rimuove tutte le entry del namespace, qualunque sia la freschezza."""
        removed = 0
        for key in await self.store.keys(self.prefix):
            if await self.store.delete(key):
                removed += 1
        logger.info("Cleared %d cache entries", removed)
        return removed

    async def stats(self) -> CacheStats:
        """Conteggio entry del namespace per livello di freschezza."""
        stats = CacheStats()
        for key in await self.store.keys(self.prefix):
            entry = await self.read(key)
            if entry is None:
                continue
            stats.total += 1
            freshness = self.classify(entry)
            if freshness is Freshness.FRESH:
                stats.fresh += 1
            elif freshness is Freshness.STALE:
                stats.stale += 1
            else:
                stats.expired += 1
        return stats


def _size(data) -> str:
    return f"{len(data)} items" if isinstance(data, list) else type(data).__name__
