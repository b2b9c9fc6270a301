# =============================================================================
# lib/cache.py - In-Memory TTL Cache
# =============================================================================
# Small key -> value cache with per-entry expiry.
#
# Instances are created by app/dependencies.py and passed into the code that
# needs them (JWKS keys, message of the day) rather than living as module
# globals, so tests can hand in a fresh cache and a fake clock.
# =============================================================================

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, TypeVar

T = TypeVar("T")


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """
    Thread-safe TTL cache.

    Example:
        cache = TTLCache(default_ttl_seconds=60)
        cache.set("couple:2026-01-01", message)
        cache.get("couple:2026-01-01")  # message, until it expires
    """

    def __init__(
        self,
        *,
        default_ttl_seconds: float = 300.0,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.time,
    ):
        self._default_ttl = float(default_ttl_seconds)
        self._max_keys = max_keys
        self._clock = clock
        self._lock = Lock()
        self._data: dict[str, _Entry] = {}

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
            if not entry:
                return None
            if entry.expires_at <= now:
                self._data.pop(key, None)
                return None
            return entry.value

    def get_stale(self, key: str) -> Any | None:
        """Return a value even if it has expired (fallback when a refresh fails)."""
        with self._lock:
            entry = self._data.get(key)
            return entry.value if entry else None

    def set(self, key: str, value: Any, *, ttl_seconds: float | None = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        expires_at = self._clock() + ttl
        with self._lock:
            if key not in self._data and len(self._data) >= self._max_keys:
                self._evict_locked()
            self._data[key] = _Entry(value=value, expires_at=expires_at)

    def get_or_set(
        self,
        key: str,
        factory: Callable[[], T],
        *,
        ttl_seconds: float | None = None,
    ) -> T:
        hit = self.get(key)
        if hit is not None:
            return hit
        value = factory()
        self.set(key, value, ttl_seconds=ttl_seconds)
        return value

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _evict_locked(self) -> None:
        # Expired entries first, then the oldest insertion.
        now = self._clock()
        expired = [k for k, e in self._data.items() if e.expires_at <= now]
        for k in expired:
            self._data.pop(k, None)
        if len(self._data) >= self._max_keys:
            self._data.pop(next(iter(self._data)), None)
