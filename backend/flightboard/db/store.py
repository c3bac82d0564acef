"""
KeyValueStore - adapter minimale su uno store chiave/valore di stringhe.

Due implementazioni:
  MemoryKeyValueStore → effimero, in-process (default)
  RedisKeyValueStore  → redis.asyncio, quando REDIS_URL è configurato

Entrambe supportano la ricerca per prefisso in modo nativo:
la memoria tiene un indice ordinato delle chiavi (range lookup con bisect),
Redis usa SCAN MATCH lato server. La cache non deve mai scorrere
l'intero store per trovare le proprie entry.
"""
import bisect
import logging
from typing import Protocol, runtime_checkable

import redis.asyncio as aioredis

from flightboard.config import settings
from flightboard.db.redis import get_redis

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> bool:
        """True se la chiave esisteva."""
        ...

    async def keys(self, prefix: str) -> list[str]:
        """Tutte le chiavi che iniziano con prefix."""
        ...


class MemoryKeyValueStore:

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._index: list[str] = []  # chiavi ordinate

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if key not in self._data:
            bisect.insort(self._index, key)
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        pos = bisect.bisect_left(self._index, key)
        del self._index[pos]
        return True

    async def keys(self, prefix: str) -> list[str]:
        start = bisect.bisect_left(self._index, prefix)
        result = []
        for key in self._index[start:]:
            if not key.startswith(prefix):
                break
            result.append(key)
        return result

    def __len__(self) -> int:
        return len(self._data)


class RedisKeyValueStore:

    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def delete(self, key: str) -> bool:
        return bool(await self._client.delete(key))

    async def keys(self, prefix: str) -> list[str]:
        # I caratteri glob nel prefisso vanno escapati per MATCH
        pattern = _escape_glob(prefix) + "*"
        return [key async for key in self._client.scan_iter(match=pattern)]


def _escape_glob(value: str) -> str:
    for ch in ("\\", "*", "?", "[", "]"):
        value = value.replace(ch, "\\" + ch)
    return value


async def build_store() -> KeyValueStore:
    """Redis se REDIS_URL è configurato, altrimenti store in memoria."""
    if settings.redis_url:
        client = await get_redis()
        await client.ping()  # verifica connessione Redis all'avvio
        logger.info("Cache store: redis")
        return RedisKeyValueStore(client)
    logger.info("Cache store: memory (REDIS_URL non configurato)")
    return MemoryKeyValueStore()
