from typing import Any, Optional
import json
import structlog
from redis import asyncio as aioredis

from .session_store import SessionStore

logger = structlog.get_logger(__name__)


class RedisSessionStore(SessionStore):
    """Session store backed by a Redis-compatible KV service"""

    def __init__(self, client: aioredis.Redis, ttl: Optional[int] = None):
        self.client = client
        self.ttl = ttl

    @classmethod
    def from_url(cls, url: str, ttl: Optional[int] = None) -> "RedisSessionStore":
        return cls(aioredis.from_url(url, decode_responses=True), ttl=ttl)

    async def get(self, key: str) -> Optional[Any]:
        raw = await self.client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding undecodable value", key=key)
            return None

    async def set(self, key: str, value: Any) -> None:
        await self.client.set(key, json.dumps(value), ex=self.ttl)

    async def delete(self, key: str) -> bool:
        return bool(await self.client.delete(key))

    async def close(self) -> None:
        await self.client.aclose()
