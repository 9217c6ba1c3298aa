from abc import ABC, abstractmethod
from typing import Any, Optional
import structlog

from task_wizard.infrastructure.config.settings import ServerSettings

logger = structlog.get_logger(__name__)


SESSION_KEY_PREFIX = "session:"


def session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


class SessionStore(ABC):
    """Key-value backend holding session records"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value or None"""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key, returning whether it existed"""
        pass

    async def close(self) -> None:
        """Release backend resources"""
        return None


def create_session_store(settings: ServerSettings) -> SessionStore:
    """Select the store backend once, based on configuration"""

    if settings.use_remote_store:
        from .redis_store import RedisSessionStore

        logger.info("Using Redis session store")
        return RedisSessionStore.from_url(settings.kv_url, ttl=settings.session_ttl_seconds)

    from .memory_store import InMemorySessionStore

    logger.info("Using in-memory session store")
    return InMemorySessionStore(ttl=settings.session_ttl_seconds)
