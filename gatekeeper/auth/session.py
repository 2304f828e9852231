"""
Session stores used by authentication providers to keep per-user values,
such as the OAuth2 state nonce and access token, between requests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import asyncio
import json
import logging

import redis.asyncio as redis


logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Key-value store scoped to a single user session."""

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default"""
        pass

    @abstractmethod
    async def save(self, key: str, value: Any) -> None:
        """Store a value under key"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove key; return True if it existed"""
        pass

    async def close(self) -> None:
        """Release resources held by the store"""
        pass


class MemorySessionStore(SessionStore):
    """In-memory session store for development and testing"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str, default: Any = None) -> Any:
        async with self._lock:
            return self._data.get(key, default)

    async def save(self, key: str, value: Any) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if key in self._data:
                del self._data[key]
                return True
            return False


class RedisSessionStore(SessionStore):
    """
    Redis-backed session store. Values are stored as JSON under
    ``<key_prefix><session_id>:<key>`` and expire after ``ttl`` seconds.
    """

    def __init__(self, session_id: str, url: str = "redis://localhost:6379/0",
                 key_prefix: str = "gatekeeper:session:", ttl: int = 3600,
                 client: Optional[redis.Redis] = None):
        self.session_id = session_id
        self.key_prefix = key_prefix
        self.ttl = ttl
        self._client = client or redis.from_url(url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{self.session_id}:{key}"

    async def get(self, key: str, default: Any = None) -> Any:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return default
        return json.loads(raw)

    async def save(self, key: str, value: Any) -> None:
        await self._client.set(self._key(key), json.dumps(value), ex=self.ttl)
        logger.debug(f"Saved session value {key} for session {self.session_id}")

    async def delete(self, key: str) -> bool:
        return await self._client.delete(self._key(key)) > 0

    async def close(self) -> None:
        await self._client.aclose()
