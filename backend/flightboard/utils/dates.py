"""
Utility date - parsing del giorno richiesto e conversione giorno locale → range UTC.

Usate da:
  - FlightCache.key()         (data ISO nel nome della chiave)
  - AeroApiProvider           (start/end della query al provider)
  - route /departures, /arrivals e /board
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flightboard.errors import ValidationError


def parse_day(value: date | str | None) -> date:
    """Accetta una date o una stringa YYYY-MM-DD; altrimenti ValidationError."""
    if value is None or value == "":
        raise ValidationError("Date parameter is required")
    if isinstance(value, datetime):
        # datetime è sottoclasse di date: va rifiutato, serve un giorno di calendario
        raise ValidationError(f"Expected a calendar date, got datetime {value!r}")
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def local_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """
    Converte un giorno di calendario nel fuso dell'aeroporto nel range
    assoluto [start, end) in UTC.

    Es. 2024-03-01 in Asia/Brunei (UTC+8) → 2024-02-29T16:00Z, 2024-03-01T16:00Z
    """
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        raise ValidationError(f"Unknown timezone {tz_name!r}")

    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def to_iso_z(moment: datetime) -> str:
    """Formato ISO 8601 in UTC con suffisso Z (es. 2024-02-29T16:00:00Z)."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
