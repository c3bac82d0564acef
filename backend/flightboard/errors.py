"""
Tassonomia degli errori FlightBoard.

  ValidationError       → parametro mancante/non valido (4xx, mai ritentato)
  NetworkError          → timeout o errore di trasporto verso il provider
  ProviderError         → risposta non-2xx (o body illeggibile) dal provider
  CacheCorruptionError  → entry salvata non deserializzabile; solo interno,
                          la cache la tratta come miss

Le route traducono questi errori in body JSON, l'orchestrator converte i
FetchError nel campo `error` dello stato.
"""


class FlightBoardError(Exception):
    """Base di tutti gli errori applicativi."""


class ValidationError(FlightBoardError):
    pass


class FetchError(FlightBoardError):
    """Base per i fallimenti della chiamata al provider."""


class NetworkError(FetchError):
    pass


class ProviderError(FetchError):

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Provider error: HTTP {status_code} - {body[:200]}")


class CacheCorruptionError(FlightBoardError):

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Corrupt cache entry {key}: {reason}")
