"""Memory Engine - 사용자별 메모리 캐시 + AI 컨텍스트 조립

- 라이프 요약 (TTL 24h) / 어제 요약 (TTL 6h, 날짜 키) 두 개의 캐시를 소유
- 캐시 재빌드 실패 시 이전 값 또는 기본값을 반환 (예외 전파 없음)
- get_context_for_ai()는 로드된 상태만 보고 줄 수가 제한된 텍스트를 만듦

로그인한 사용자 세션마다 하나씩 생성되고 로그아웃 시 폐기됩니다.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from ...config import (
    get_now,
    LIFE_SUMMARY_TTL,
    YESTERDAY_SUMMARY_TTL,
    MIN_MEMORY_IMPORTANCE,
    MAX_IMPORTANT_MEMORIES,
    FOCUS_LOOKBACK_DAYS,
    MAX_RECENT_DAY_SUMMARIES,
    MAX_GOALS,
    MAX_HABITS,
    MAX_STUDY_FOCUS,
    MAX_OPEN_LOOPS,
    MAX_CONTEXT_LINES,
    DEFAULT_MOOD_PATTERN,
)
from ...database import StoreError, get_summary_for_date
from ...utils.schemas import LifeMemorySummary, ChatDaySummary, MemoryContext, ResponsePath
from ..router.response_path import is_deep_request, get_response_path
from .cache import CacheEntry
from .life_summary import summarize_life_memories

logger = logging.getLogger(__name__)


def _one_line(text) -> str:
    return " ".join(str(text or "").split())


def _join_capped(items: Iterable[str], limit: int) -> str:
    cleaned = [_one_line(item) for item in list(items)[:limit]]
    return ", ".join(item for item in cleaned if item)


def render_context(context: MemoryContext) -> str:
    """MemoryContext → AI 주입용 텍스트 (섹션 순서 고정, 최대 MAX_CONTEXT_LINES줄)

    데이터가 없으면 빈 문자열 (헤더/플레이스홀더 없음)
    """
    if not context.is_loaded:
        return ""

    life = context.life_summary
    lines = []

    goals = _join_capped(context.active_goals, MAX_GOALS)
    if goals:
        lines.append(f"Active goals: {goals}")

    habits = _join_capped(life.habits, MAX_HABITS)
    if habits:
        lines.append(f"Regular habits: {habits}")

    study_focus = _join_capped(life.study_focus, MAX_STUDY_FOCUS)
    if study_focus:
        lines.append(f"Study focus: {study_focus}")

    mood = _one_line(life.mood_pattern)
    if mood and mood != DEFAULT_MOOD_PATTERN:
        lines.append(f"Mood pattern: {mood}")

    yesterday = context.yesterday_summary
    if yesterday:
        summary_text = _one_line(yesterday.summary_text)
        if summary_text:
            lines.append(f"Yesterday: {summary_text}")
        open_loops = _join_capped(yesterday.open_loops, MAX_OPEN_LOOPS)
        if open_loops:
            lines.append(f"Pending: {open_loops}")

    return "\n".join(lines[:MAX_CONTEXT_LINES])


class MemoryEngine:
    """사용자 1명의 메모리 캐시와 컨텍스트"""

    def __init__(self, db, user_id: str, clock: Callable[[], datetime] = get_now):
        self.db = db
        self.user_id = user_id
        self.clock = clock

        self._life_cache: CacheEntry[LifeMemorySummary] = CacheEntry(ttl=LIFE_SUMMARY_TTL)
        self._yesterday_cache: CacheEntry[ChatDaySummary] = CacheEntry(ttl=YESTERDAY_SUMMARY_TTL)
        self._life_lock = asyncio.Lock()
        self._yesterday_lock = asyncio.Lock()

        self._context = MemoryContext()
        self._load_task: Optional[asyncio.Task] = None

    @property
    def context(self) -> MemoryContext:
        return self._context

    @property
    def is_loaded(self) -> bool:
        return self._context.is_loaded

    # ============================================
    # 라이프 요약 (TTL 24h)
    # ============================================

    async def build_life_summary(self) -> LifeMemorySummary:
        """캐시가 유효하면 그대로, 아니면 장기 기억 + 최근 일일 요약으로 재빌드"""
        if not self._life_cache.is_stale(self.clock()):
            logger.debug(f"[MemoryEngine] 라이프 요약 캐시 사용: {self.user_id}")
            return self._life_cache.value

        async with self._life_lock:
            now = self.clock()
            if not self._life_cache.is_stale(now):
                return self._life_cache.value

            try:
                memories, day_summaries = await asyncio.gather(
                    self.db.list_important_memories(
                        self.user_id, MIN_MEMORY_IMPORTANCE, MAX_IMPORTANT_MEMORIES
                    ),
                    self.db.list_recent_day_summaries(
                        self.user_id, now - timedelta(days=FOCUS_LOOKBACK_DAYS), MAX_RECENT_DAY_SUMMARIES
                    ),
                )
            except StoreError as e:
                if self._life_cache.filled:
                    logger.warning(f"⚠️ [MemoryEngine] 라이프 요약 재빌드 실패 → 이전 값 사용: {e}")
                    return self._life_cache.value
                logger.warning(f"⚠️ [MemoryEngine] 라이프 요약 빌드 실패 → 기본값 사용: {e}")
                return LifeMemorySummary()

            summary = summarize_life_memories(memories, day_summaries)
            self._life_cache.set(summary, now)
            logger.info(
                f"[MemoryEngine] 라이프 요약 빌드 완료: {self.user_id} "
                f"(memories={len(memories)}, goals={len(summary.goals)}, habits={len(summary.habits)})"
            )
            return summary

    # ============================================
    # 어제 요약 (TTL 6h, 날짜 키)
    # ============================================

    async def get_yesterday_summary(self) -> Optional[ChatDaySummary]:
        """어제 날짜 구간의 일일 요약 (없으면 None도 캐시)"""
        now = self.clock()
        key = (now.date() - timedelta(days=1)).isoformat()
        if not self._yesterday_cache.is_stale(now, key):
            logger.debug(f"[MemoryEngine] 어제 요약 캐시 사용: {self.user_id} {key}")
            return self._yesterday_cache.value

        async with self._yesterday_lock:
            now = self.clock()
            yesterday = now.date() - timedelta(days=1)
            key = yesterday.isoformat()
            if not self._yesterday_cache.is_stale(now, key):
                return self._yesterday_cache.value

            try:
                summary = await get_summary_for_date(self.db, self.user_id, yesterday, now.tzinfo)
            except StoreError as e:
                if self._yesterday_cache.filled and self._yesterday_cache.key == key:
                    logger.warning(f"⚠️ [MemoryEngine] 어제 요약 조회 실패 → 이전 값 사용: {e}")
                    return self._yesterday_cache.value
                logger.warning(f"⚠️ [MemoryEngine] 어제 요약 조회 실패 → 없음으로 처리: {e}")
                return None

            self._yesterday_cache.set(summary, now, key)
            return summary

    # ============================================
    # 컨텍스트 로드 (single-flight)
    # ============================================

    async def load_memory_context(self) -> MemoryContext:
        """두 캐시를 동시에 준비해서 MemoryContext로 합침

        동시에 여러 번 호출되면 진행 중인 로드 하나를 함께 기다립니다.
        """
        if self._load_task is None or self._load_task.done():
            self._load_task = asyncio.create_task(self._load())
        return await asyncio.shield(self._load_task)

    async def _load(self) -> MemoryContext:
        life_summary, yesterday_summary = await asyncio.gather(
            self.build_life_summary(),
            self.get_yesterday_summary(),
        )
        self._context = MemoryContext(
            life_summary=life_summary,
            yesterday_summary=yesterday_summary,
            active_goals=list(life_summary.goals),
            is_loaded=True,
        )
        logger.info(
            f"✅ [MemoryEngine] 메모리 컨텍스트 로드 완료: {self.user_id} "
            f"(yesterday={'있음' if yesterday_summary else '없음'})"
        )
        return self._context

    def get_context_for_ai(self) -> str:
        return render_context(self._context)

    # ============================================
    # 라우팅
    # ============================================

    def is_deep_request(self, message) -> bool:
        return is_deep_request(message)

    def get_response_path(self, message) -> ResponsePath:
        return get_response_path(message)

    # ============================================
    # 무효화 (값은 실패 시 fallback으로 유지)
    # ============================================

    def invalidate_life_summary(self) -> None:
        self._life_cache.invalidate()

    def invalidate_yesterday_summary(self) -> None:
        self._yesterday_cache.invalidate()

    def invalidate(self) -> None:
        self.invalidate_life_summary()
        self.invalidate_yesterday_summary()
        logger.info(f"[MemoryEngine] 캐시 무효화: {self.user_id}")
