"""
Verdict Cache Tests
"""

import pytest

from promptclear.cache import VerdictCache
from promptclear.schemas.judge import VaguenessVerdict


def _verdict(score=40):
    return VaguenessVerdict(vagueness_score=score, reasoning="cached")


class TestVerdictCache:

    @pytest.mark.asyncio
    async def test_put_then_get(self):
        cache = VerdictCache()
        await cache.put("fix it", "gemini", _verdict())
        assert (await cache.get("fix it", "gemini")).vagueness_score == 40

    @pytest.mark.asyncio
    async def test_keyed_by_judge(self):
        cache = VerdictCache()
        await cache.put("fix it", "gemini:a", _verdict())
        assert await cache.get("fix it", "gemini:b") is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_dropped(self):
        cache = VerdictCache(ttl_seconds=-1)
        await cache.put("fix it", "gemini", _verdict())
        assert await cache.get("fix it", "gemini") is None
        assert cache.stats["entries"] == 0

    @pytest.mark.asyncio
    async def test_evicts_oldest_when_full(self):
        cache = VerdictCache(max_entries=2)
        await cache.put("a", "j", _verdict(1))
        await cache.put("b", "j", _verdict(2))
        await cache.put("c", "j", _verdict(3))
        assert await cache.get("a", "j") is None
        assert (await cache.get("c", "j")).vagueness_score == 3
        assert cache.stats["entries"] == 2

    @pytest.mark.asyncio
    async def test_overwrite_does_not_evict(self):
        cache = VerdictCache(max_entries=2)
        await cache.put("a", "j", _verdict(1))
        await cache.put("b", "j", _verdict(2))
        await cache.put("b", "j", _verdict(5))
        assert (await cache.get("a", "j")).vagueness_score == 1
        assert (await cache.get("b", "j")).vagueness_score == 5

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self):
        cache = VerdictCache()
        await cache.put("a", "j", _verdict())
        await cache.put("b", "j", _verdict())
        await cache.invalidate("a", "j")
        assert await cache.get("a", "j") is None
        await cache.clear()
        assert cache.stats["entries"] == 0

    @pytest.mark.asyncio
    async def test_stats(self):
        cache = VerdictCache()
        await cache.put("a", "j", _verdict())
        await cache.get("a", "j")
        await cache.get("missing", "j")
        assert cache.stats == {"entries": 1, "hits": 1, "misses": 1, "hit_rate": 0.5}
