from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from app.promohub.core.config import settings
from app.promohub.services.promotion_query import PromotionQuery


@dataclass(frozen=True)
class CacheEntry:
    value: dict[str, Any]
    headers: dict[str, str]
    expires_at: float


def listing_ttl(query: PromotionQuery) -> float:
    if query.search:
        return settings.PROMOTIONS_CACHE_TTL_SEARCH_SEC
    if query.status == "active":
        return settings.PROMOTIONS_CACHE_TTL_ACTIVE_SEC
    return settings.PROMOTIONS_CACHE_TTL_DEFAULT_SEC


def listing_key(tenant_id: str, query: PromotionQuery) -> str:
    return f"{tenant_id}:promotions:{query.cache_key()}"


class ListingCache:
    """Per-instance TTL cache for promotion listing payloads.

    Entries are not shared between processes; each instance expires its own.
    All access is serialized through one lock.
    """

    def __init__(self, now: Callable[[], float] | None = None) -> None:
        self._now = now or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if not entry:
                return None
            if entry.expires_at <= self._now():
                self._entries.pop(key, None)
                return None
            return entry

    def set(self, key: str, value: dict[str, Any], *, ttl_seconds: float, headers: dict[str, str] | None = None) -> None:
        with self._lock:
            now = self._now()
            self._purge_expired(now)
            self._entries[key] = CacheEntry(
                value=value,
                headers=dict(headers or {}),
                expires_at=now + max(0.0, ttl_seconds),
            )

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]

    def invalidate_prefix(self, prefix: str) -> None:
        with self._lock:
            stale_keys = [key for key in self._entries if key.startswith(prefix)]
            for key in stale_keys:
                self._entries.pop(key, None)

    def invalidate_tenant(self, tenant_id: str) -> None:
        self.invalidate_prefix(f"{tenant_id}:promotions:")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
