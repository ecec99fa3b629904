"""
Simple in-memory TTL cache for decoded upstream documents.
"""

import asyncio
import time
from typing import Any, Dict, Optional


class InMemoryCache:
    """In-memory cache with per-entry TTL support."""

    def __init__(self, default_ttl: Optional[float] = None):
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        async with self._lock:
            if key in self._cache:
                entry = self._cache[key]
                if entry["expires_at"] is None or entry["expires_at"] > time.monotonic():
                    return entry["value"]
                # Expired, remove it
                del self._cache[key]
            return None

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """Set value in cache with optional expiration; a TTL of 0 stores nothing."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl is not None and ttl <= 0:
            return False

        async with self._lock:
            expires_at = None
            if ttl is not None:
                expires_at = time.monotonic() + ttl

            self._cache[key] = {
                "value": value,
                "expires_at": expires_at,
            }
            return True

    async def delete(self, key: str) -> int:
        """Delete key from cache."""
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                return 1
            return 0

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
