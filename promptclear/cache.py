"""
Judge Verdict Cache

In-memory TTL cache for external judge verdicts.
Key = SHA-256(prompt + judge identity). TTL = 1 hour.

Prevents duplicate Gemini API calls for identical prompts.
Safe under concurrent coroutines via an asyncio lock.

Usage:
    from promptclear.cache import verdict_cache
    cached = await verdict_cache.get(prompt, judge_id)
    if cached:
        return cached
    verdict = ...
    await verdict_cache.put(prompt, judge_id, verdict)
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from typing import Optional

from promptclear.schemas.judge import VaguenessVerdict


class VerdictCache:
    """In-memory cache with TTL eviction."""

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 500):
        self._cache: dict[str, tuple[float, VaguenessVerdict]] = {}
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _make_key(prompt: str, judge_id: str) -> str:
        raw = f"{prompt}||{judge_id}"
        return hashlib.sha256(raw.encode()).hexdigest()

    async def get(self, prompt: str, judge_id: str) -> Optional[VaguenessVerdict]:
        """Return cached verdict if present and not expired."""
        key = self._make_key(prompt, judge_id)
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            ts, verdict = entry
            if time.monotonic() - ts > self._ttl:
                del self._cache[key]
                self._misses += 1
                return None

            self._hits += 1
            return verdict

    async def put(self, prompt: str, judge_id: str, verdict: VaguenessVerdict) -> None:
        """Store a verdict. Evicts the oldest entry when full."""
        key = self._make_key(prompt, judge_id)
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                oldest_key = min(self._cache, key=lambda k: self._cache[k][0])
                del self._cache[oldest_key]

            self._cache[key] = (time.monotonic(), verdict)

    async def invalidate(self, prompt: str, judge_id: str) -> None:
        key = self._make_key(prompt, judge_id)
        async with self._lock:
            self._cache.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


# Singleton, shared across the application
verdict_cache = VerdictCache()
