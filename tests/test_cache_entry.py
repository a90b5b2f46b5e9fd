"""CacheEntry TTL / 키 / 무효화 테스트"""
from datetime import datetime, timedelta, timezone

from src.service.memory import CacheEntry

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestCacheEntry:
    def test_empty_entry_is_stale(self):
        entry = CacheEntry(ttl=timedelta(hours=6))
        assert entry.is_stale(NOW)
        assert entry.value is None

    def test_fresh_until_ttl_elapses(self):
        entry = CacheEntry(ttl=timedelta(hours=6))
        entry.set("summary", NOW)

        assert not entry.is_stale(NOW)
        assert not entry.is_stale(NOW + timedelta(hours=5, minutes=59))
        assert entry.is_stale(NOW + timedelta(hours=6))

    def test_none_is_a_cacheable_value(self):
        """요약 없음(None)도 유효한 캐시 값"""
        entry = CacheEntry(ttl=timedelta(hours=6))
        entry.set(None, NOW)

        assert entry.filled
        assert not entry.is_stale(NOW + timedelta(hours=1))

    def test_key_mismatch_is_stale(self):
        entry = CacheEntry(ttl=timedelta(hours=6))
        entry.set("yesterday", NOW, key="2026-03-09")

        assert not entry.is_stale(NOW, key="2026-03-09")
        assert entry.is_stale(NOW, key="2026-03-10")
        # 키 없이 조회하면 TTL만 확인
        assert not entry.is_stale(NOW)

    def test_invalidate_keeps_value_for_fallback(self):
        entry = CacheEntry(ttl=timedelta(hours=24))
        entry.set(["goal"], NOW)
        entry.invalidate()

        assert entry.is_stale(NOW)
        assert entry.value == ["goal"]

        entry.set(["new goal"], NOW)
        assert not entry.is_stale(NOW)
