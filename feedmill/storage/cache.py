import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional

# Sentinel: "use the cache's default ttl". None means "never expires".
DEFAULT_TTL = object()


@dataclass
class CacheEntry:
    value: Any
    expires: Optional[float] = None  # monotonic instant, None = kept until overwritten

    def expired(self, now: float) -> bool:
        return self.expires is not None and now >= self.expires


class LookupCache:
    """
    In-memory key -> value store shared by the refresh job and request handlers.

    Entries either live until overwritten (ttl=None) or expire after a fixed
    number of seconds on the monotonic clock. Expired entries read as absent.
    A miss is reported as None; filling it is up to the caller.
    """

    def __init__(self, default_ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(now):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: Any = DEFAULT_TTL) -> None:
        if ttl is DEFAULT_TTL:
            ttl = self.default_ttl
        expires = None if ttl is None else self._clock() + float(ttl)
        with self._lock:
            self._entries[key] = CacheEntry(value, expires)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._entries.items() if e.expired(now)]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
