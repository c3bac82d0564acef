from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Flight data provider (FlightAware AeroAPI)
    aeroapi_api_key: str = ""
    aeroapi_base_url: str = "https://aeroapi.flightaware.com/aeroapi"

    # Aeroporto servito dalla board
    default_airport: str = "BWN"
    airport_timezone: str = "Asia/Brunei"
    # Forma alternativa del codice (IATA <-> ICAO) usata nel fallback
    airport_aliases: dict[str, str] = {"BWN": "WBSB"}

    # Timeout provider (secondi)
    request_timeout_seconds: float = 15.0
    fallback_timeout_seconds: float = 10.0

    # Cache
    cache_prefix: str = "flightdata_"
    cache_fresh_minutes: int = 15
    cache_stale_minutes: int = 60
    # Vuoto = store in memoria (effimero)
    redis_url: str = ""

    # Orchestrator: scarta i risultati di chiamate superate da una più recente
    discard_superseded_results: bool = False

    # App
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"


# Istanza globale usata in tutto il progetto
settings = Settings()
