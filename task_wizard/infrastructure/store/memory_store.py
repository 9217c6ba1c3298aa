from typing import Dict, Any, Optional
import asyncio
import copy
from datetime import datetime, timedelta, timezone
import structlog

from .session_store import SessionStore

logger = structlog.get_logger(__name__)


class InMemorySessionStore(SessionStore):
    """Process-local session store with optional TTL"""

    def __init__(self, ttl: Optional[int] = None):
        self.ttl = ttl
        self.cache: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    def _expiry(self) -> Optional[datetime]:
        if not self.ttl:
            return None
        return datetime.now(timezone.utc) + timedelta(seconds=self.ttl)

    async def set(self, key: str, value: Any) -> None:
        """Set a value, refreshing its TTL"""

        logger.debug("Setting key", key=key)
        async with self._lock:
            self.cache[key] = {
                "value": copy.deepcopy(value),
                "expires_at": self._expiry()
            }

    async def get(self, key: str) -> Optional[Any]:
        """Get value if present and not expired"""

        logger.debug("Getting key", key=key)
        async with self._lock:
            if key not in self.cache:
                return None

            entry = self.cache[key]

            # Check if expired
            expires_at = entry["expires_at"]
            if expires_at is not None and datetime.now(timezone.utc) > expires_at:
                del self.cache[key]
                return None

            return copy.deepcopy(entry["value"])

    async def delete(self, key: str) -> bool:
        """Delete a key"""

        logger.debug("Deleting key", key=key)
        async with self._lock:
            if key in self.cache:
                del self.cache[key]
                return True
            return False

    async def clear_expired(self) -> int:
        """Clear expired entries and return count"""

        async with self._lock:
            now = datetime.now(timezone.utc)
            expired_keys = [
                key for key, entry in self.cache.items()
                if entry["expires_at"] is not None and now > entry["expires_at"]
            ]

            for key in expired_keys:
                del self.cache[key]

            return len(expired_keys)
