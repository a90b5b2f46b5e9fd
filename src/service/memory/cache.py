"""TTL 캐시 엔트리"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """cache-aside용 TTL 엔트리

    - value가 None이어도 filled=True면 유효한 캐시 값 (예: 어제 요약 없음)
    - key가 지정되면 다른 key로 조회 시 stale (예: 날짜가 바뀐 어제 요약)
    - invalidate() 후에도 value는 남겨두어 재빌드 실패 시 fallback으로 사용
    """
    ttl: timedelta
    value: Optional[T] = None
    fetched_at: Optional[datetime] = None
    key: Optional[str] = None
    filled: bool = False
    invalidated: bool = False

    def is_stale(self, now: datetime, key: Optional[str] = None) -> bool:
        if not self.filled or self.invalidated:
            return True
        if key is not None and key != self.key:
            return True
        return now - self.fetched_at >= self.ttl

    def set(self, value: Optional[T], now: datetime, key: Optional[str] = None) -> None:
        self.value = value
        self.fetched_at = now
        self.key = key
        self.filled = True
        self.invalidated = False

    def invalidate(self) -> None:
        self.invalidated = True
