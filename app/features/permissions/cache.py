"""
Time-bounded cache for resolved role names.

Entries expire at a fixed instant (set time + TTL) regardless of reads, so a
revoked role stays visible for at most one TTL. There is no write-through
invalidation from the role-binding store.
"""
import time
from typing import Callable, Dict, Generic, Optional, Protocol, Tuple, TypeVar


V = TypeVar("V")


class RoleCache(Protocol[V]):
    """Cache interface the role resolver depends on."""

    def get(self, key: str) -> Optional[V]:
        ...

    def set(self, key: str, value: V, ttl: float) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def clear(self) -> None:
        ...


class TTLRoleCache(Generic[V]):
    """
    In-memory RoleCache.

    Args:
        clock: Monotonic seconds source; tests inject a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[V, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: V, ttl: float) -> None:
        self.purge_expired()
        self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)
