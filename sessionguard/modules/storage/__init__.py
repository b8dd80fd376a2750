"""
Storage Module - Black Box Interface

Purpose: Persist session data keyed by identifier
Interface: SessionStore (read/write/delete), StorageModule.connect()
Hidden: Redis specifics, connection handling, serialization

Can be replaced with any storage backend without affecting other modules.
"""

import os
from typing import Optional

import redis.asyncio as redis

from .store import DEFAULT_TTL, InMemorySessionStore, RedisSessionStore, SessionStore


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: str = None, password: Optional[str] = None):
        """Initialize storage with connection URL."""
        self.url = connection_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.password = password
        self._client = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def session_store(self, default_ttl: int = DEFAULT_TTL) -> RedisSessionStore:
        """Get a Redis-backed session store on this connection."""
        return RedisSessionStore(await self.connect(), default_ttl=default_ttl)

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.close()
            self._client = None


__all__ = [
    "StorageModule",
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    "DEFAULT_TTL",
]
