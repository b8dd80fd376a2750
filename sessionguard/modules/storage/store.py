import copy
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Protocol

from cachetools import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_TTL = 1440
DEFAULT_MAXSIZE = 10000


class SessionStore(Protocol):
    """Contract for the storage collaborator: data keyed by session identifier."""

    async def read(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Read session data.

        Args:
            session_id: Session identifier

        Returns:
            A private copy of the data, or None if nothing is stored
        """
        ...

    async def write(
        self, session_id: str, data: Dict[str, Any], ttl_seconds: Optional[int] = None
    ) -> None:
        """Replace the data stored for an identifier."""
        ...

    async def delete(self, session_id: str) -> None:
        """Drop the data stored for an identifier. Missing identifiers are ignored."""
        ...


class InMemorySessionStore:
    """
    Process-local session store.

    Entries live in a cachetools TTLCache, so expired and least recently
    used entries are released as the cache is written to. Each entry also
    carries its own expiry for writes with a shorter ttl; the cache ttl
    bounds every entry's lifetime. Reads and writes copy the data so that
    concurrent requests only observe each other through writes.
    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL,
        maxsize: int = DEFAULT_MAXSIZE,
        ttl: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize in-memory session store.

        Args:
            default_ttl: TTL in seconds applied when a write gives none
            maxsize: Maximum number of sessions held
            ttl: Upper bound on any entry's lifetime (default: default_ttl)
            clock: Returns the current UNIX time in seconds
        """
        self.default_ttl = default_ttl
        self.clock = clock
        self.cache = TTLCache(maxsize=maxsize, ttl=ttl or default_ttl, timer=clock)

    async def read(self, session_id: str) -> Optional[Dict[str, Any]]:
        entry = self.cache.get(session_id)
        if entry is None:
            return None

        data, expires_at = entry
        if expires_at <= self.clock():
            self.cache.pop(session_id, None)
            return None

        return copy.deepcopy(data)

    async def write(
        self, session_id: str, data: Dict[str, Any], ttl_seconds: Optional[int] = None
    ) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        self.cache[session_id] = (copy.deepcopy(data), self.clock() + ttl)

    async def delete(self, session_id: str) -> None:
        self.cache.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        entry = self.cache.get(session_id)
        return entry is not None and entry[1] > self.clock()

    def __len__(self) -> int:
        self.cache.expire()
        now = self.clock()
        return sum(1 for _, expires_at in self.cache.values() if expires_at > now)


class RedisSessionStore:
    def __init__(self, redis_client, default_ttl: int = DEFAULT_TTL, key_prefix: str = "session:"):
        """
        Initialize Redis-backed session store.

        Args:
            redis_client: Async Redis client
            default_ttl: TTL in seconds applied when a write gives none
            key_prefix: Prefix for session keys
        """
        self.redis = redis_client
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    async def read(self, session_id: str) -> Optional[Dict[str, Any]]:
        raw = await self.redis.get(self._key(session_id))
        if not raw:
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable session payload")
            return None

        if not isinstance(data, dict):
            logger.warning("Discarding non-mapping session payload")
            return None
        return data

    async def write(
        self, session_id: str, data: Dict[str, Any], ttl_seconds: Optional[int] = None
    ) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        await self.redis.setex(self._key(session_id), max(int(ttl), 1), json.dumps(data))

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))
