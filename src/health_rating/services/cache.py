"""Key-value cache with per-entry TTL and least-recently-used eviction."""

import asyncio
import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from health_rating.clock import Clock, utc_now

DEFAULT_MAX_SIZE = 5000
DEFAULT_TTL_SECONDS = 300
EVICTION_RATIO = 0.2

_UNSAFE_NAME = re.compile(r"[^a-zA-Z0-9_]")
_UNSAFE_TEXT = re.compile(r"[^\w\s-]")
_NUMERIC_TEXT = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

_logger = logging.getLogger(__name__)


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str | None) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str | None, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL in seconds."""

    def delete(self, key: str | None) -> None:
        """Remove a cached value."""


@dataclass
class _CacheEntry:
    key: str
    data: object
    expires_at: datetime
    last_accessed: datetime


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy and usage counters."""

    total_entries: int
    active_entries: int
    expired_entries: int
    average_age_seconds: float
    max_size: int
    hits: int
    misses: int
    evictions: int


def generate_key(method: str, params: dict[str, object] | None = None) -> str:
    """Build a deterministic cache key that is safe to log."""
    sanitized_method = _UNSAFE_NAME.sub("", str(method))
    sanitized_params = _sanitize_params(params or {})
    encoded = json.dumps(sanitized_params, sort_keys=True, separators=(",", ":"))
    return f"{sanitized_method}:{encoded}"


def _sanitize_params(params: dict[str, object]) -> dict[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in params.items():
        clean = _sanitize_value(value)
        if clean is not None:
            sanitized[_UNSAFE_NAME.sub("", str(key))] = clean
    return sanitized


def _sanitize_value(value: object) -> object | None:
    if isinstance(value, dict):
        return _sanitize_params(value)
    if isinstance(value, list | tuple):
        return [_sanitize_value(item) for item in value]
    if isinstance(value, str):
        # Numbers stored as text keep their decimal point so "5.0" and "50" differ.
        if _NUMERIC_TEXT.fullmatch(value):
            return value
        return _UNSAFE_TEXT.sub("", value)
    if isinstance(value, bool | int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return None


class InMemoryCache(Cache):
    """In-memory TTL cache bounded by a maximum number of entries."""

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Clock = utc_now,
    ) -> None:
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str | None) -> object | None:
        """Return a cached value if it hasn't expired, marking it as used."""
        if not key:
            return None
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        now = self._clock()
        if now > entry.expires_at:
            self.delete(key)
            self._misses += 1
            return None
        entry.last_accessed = now
        self._hits += 1
        return entry.data

    def set(
        self, key: str | None, value: object, ttl_seconds: float = DEFAULT_TTL_SECONDS
    ) -> None:
        """Store a value, evicting least-recently-used entries when full."""
        if not key:
            return
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._evict_lru()
        now = self._clock()
        self._entries[key] = _CacheEntry(
            key=key,
            data=value,
            expires_at=now + timedelta(seconds=ttl_seconds),
            last_accessed=now,
        )
        self._schedule_expiry(key, ttl_seconds)

    def delete(self, key: str | None) -> None:
        """Remove an entry and cancel its expiry timer."""
        if not key:
            return
        self._entries.pop(key, None)
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def delete_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with the prefix."""
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            self.delete(key)
        return len(keys)

    def clear(self) -> None:
        """Remove all entries and timers."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._entries.clear()

    def sweep_expired(self) -> int:
        """Drop expired entries without touching access times; return the count."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            self.delete(key)
        return len(expired)

    def get_stats(self) -> CacheStats:
        """Return occupancy and usage statistics without modifying entries."""
        now = self._clock()
        active = [entry for entry in self._entries.values() if now <= entry.expires_at]
        total_age = sum(
            (now - entry.last_accessed).total_seconds() for entry in active
        )
        return CacheStats(
            total_entries=len(self._entries),
            active_entries=len(active),
            expired_entries=len(self._entries) - len(active),
            average_age_seconds=total_age / len(active) if active else 0.0,
            max_size=self.max_size,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def _evict_lru(self) -> None:
        count = max(1, math.floor(self.max_size * EVICTION_RATIO))
        oldest = sorted(self._entries.values(), key=lambda entry: entry.last_accessed)
        evicted = oldest[:count]
        for entry in evicted:
            self.delete(entry.key)
        self._evictions += len(evicted)
        _logger.info("Cache full: evicted %s least recently used entries", len(evicted))

    def _schedule_expiry(self, key: str, ttl_seconds: float) -> None:
        previous = self._timers.pop(key, None)
        if previous is not None:
            previous.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Without a running loop, expiry falls back to lazy deletion in get().
            return
        self._timers[key] = loop.call_later(ttl_seconds, self.delete, key)
