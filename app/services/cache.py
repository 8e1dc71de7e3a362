"""
Entity Cache
In-process cache of mapped entities keyed by (entity, id)
"""

import time
from collections import defaultdict
from typing import Any, Dict, Optional, Tuple

from app.config import settings

ALL = "*"


class EntityCache:
    """
    TTL cache invalidated on mutation

    Reads populate it, every gateway write invalidates the namespaces
    it touches. A TTL of 0 disables caching.

    Each namespace carries a generation that every invalidation bumps.
    A reader takes the generation before querying and hands it to
    ``set``; a value read across a write is then not stored.
    """

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[Tuple[str, str], Tuple[float, Any]] = {}
        self._generations: Dict[str, int] = defaultdict(int)

    def generation(self, namespace: str) -> int:
        return self._generations[namespace]

    def get(self, namespace: str, key: str = ALL) -> Optional[Any]:
        entry = self._entries.get((namespace, str(key)))
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            self._entries.pop((namespace, str(key)), None)
            return None
        return value

    def set(self, namespace: str, key: str, value: Any, generation: Optional[int] = None) -> bool:
        """Store a value; returns False when skipped"""
        if self.ttl_seconds <= 0 or value is None:
            return False
        if generation is not None and generation != self._generations[namespace]:
            return False
        self._entries[(namespace, str(key))] = (time.monotonic() + self.ttl_seconds, value)
        return True

    def invalidate(self, *namespaces: str) -> None:
        """Drop every entry of the given namespaces"""
        targets = set(namespaces)
        for namespace in targets:
            self._generations[namespace] += 1
        for cache_key in [k for k in self._entries if k[0] in targets]:
            del self._entries[cache_key]

    def invalidate_key(self, namespace: str, key: str) -> None:
        self._generations[namespace] += 1
        self._entries.pop((namespace, str(key)), None)
        self._entries.pop((namespace, ALL), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Shared instance
entity_cache = EntityCache(settings.CACHE_TTL_SECONDS)
